import click

from ballotbox.services.voting import find_tally_drift


def register_cli(app):
    @app.cli.command("check-tallies")
    @click.option("--ballot-id", type=int, default=None, help="Only check this ballot.")
    def check_tallies(ballot_id):
        """Report options whose vote_count disagrees with the votes table."""
        drift = find_tally_drift(ballot_id)
        if not drift:
            click.echo("All tallies consistent.")
            return

        for row in drift:
            click.echo(
                f"ballot {row['ballot_id']} option {row['option_id']}: "
                f"stored={row['stored']} counted={row['counted']}"
            )
        click.get_current_context().exit(1)
