from shush.cli import entrypoint

entrypoint()
