from attendance_sync.main import create_app

app = create_app()

if __name__ == "__main__":
    # the reloader would start a second set of pollers
    app.run(debug=app.config["DEBUG"], use_reloader=False)
