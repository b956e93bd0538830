"""Creative Scale CLI"""

import click
from dotenv import load_dotenv

from creative import __version__
from .common import setup_logging
from .validate import validate_cmd
from .decide import decide_cmd
from .compile import compile_cmd
from .route import route_cmd
from .run import run_cmd
from .engines import engines_cmd

# Load .env file at CLI startup
load_dotenv()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """Creative Scale - strategy decisions and render routing for video ads

    \b
    Quick Start:
      creative-scale decide analysis.json --goal ctr
      creative-scale run analysis.json --mock

    \b
    Commands:
      validate   Check analysis / blueprint documents
      decide     Pick remediation strategies
      compile    Compile the chosen strategy into a render plan
      route      Execute a render plan through the engine registry
      run        Decide, compile and route in one go
      engines    List and inspect render engines
    """
    setup_logging(verbose)


# Pipeline commands
main.add_command(validate_cmd, name="validate")
main.add_command(decide_cmd, name="decide")
main.add_command(compile_cmd, name="compile")
main.add_command(route_cmd, name="route")
main.add_command(run_cmd, name="run")

# Registry commands
main.add_command(engines_cmd, name="engines")


if __name__ == "__main__":
    main()
