from chainflow.cli import app

app(prog_name="chainflow")
