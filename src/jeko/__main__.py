from jeko.cli.app import app

app()
