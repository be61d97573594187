# ABOUTME: Allows running the CLI with python -m kion_cli
# ABOUTME: Delegates to the cleo application entry point

from kion_cli.cli import main

if __name__ == "__main__":
    main()
