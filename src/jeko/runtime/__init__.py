"""Runtime: environments, resolver, interpreter, values, and natives."""
