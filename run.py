import os

from weekly_picks import create_app, db
from weekly_picks.models import Game, Group, GroupCode, Pick, User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Group": Group,
        "GroupCode": GroupCode,
        "Game": Game,
        "Pick": Pick,
    }


if __name__ == "__main__":
    app.run(
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 5000)),
        debug=app.config.get("DEBUG", False),
        use_reloader=False,
    )
