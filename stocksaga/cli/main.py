"""
stocksaga CLI - Command-line interface for the reservation saga.

    stocksaga place-order order.yaml
    stocksaga place-order order.json --store-url redis://localhost:6379/0
    stocksaga stress --stock 9 --runs 10 --conditional

This creates the 'stocksaga' command via entry point in pyproject.toml.
"""

from stocksaga.cli.app import cli


def main():
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
