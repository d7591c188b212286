from survivor import create_app, db
from survivor.models import Match, Matchweek, Pick, PickHistory, Team, User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Team": Team,
        "Matchweek": Matchweek,
        "Match": Match,
        "Pick": Pick,
        "PickHistory": PickHistory,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
