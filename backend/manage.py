from attendance_app import create_app

# flask --app manage db-upgrade | seed | run
app = create_app()

if __name__ == "__main__":
    app.run()
