from canteen import create_app

app = create_app()
