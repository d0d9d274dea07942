from memx.cli.main import app

app(prog_name="mem")
