from copabet import create_app, db
from copabet.models import Bet, Match, User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Match": Match,
        "Bet": Bet,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
