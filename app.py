from ballotbox import create_app

app = create_app()
