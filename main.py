"""Entrypoint: reads PORT from the environment and serves until terminated."""

from greeter.server import run


if __name__ == "__main__":
    run()
