from hashcc.cli.commands import app

app(prog_name="hashcc")
