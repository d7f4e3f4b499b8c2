"""
The :code:`__main__` module is used as an entrypoint when calling the module from the terminal using python -m flag.
It contains a command line browser for the variables of a PLC.

Its :code:`main()` function is also exported as a console entrypoint.
"""

import asyncio
import logging

try:
    import click
except ImportError as e:
    print(e)
    print("Try using 'pip install python-s7ua[cli]'")
    exit()

from s7ua import __version__
from s7ua.client import S7UaClient
from s7ua.config import ClientConfig
from s7ua.error import S7UaError
from s7ua.service import S7Service

logger = logging.getLogger("s7ua.browse")


async def browse(endpoint: str, config: ClientConfig) -> None:
    service = S7Service(S7UaClient(config))
    await service.connect(endpoint)
    try:
        await service.discover_structure()
        await service.read_all_variables()
        for path, variable in service.store.items():
            if variable.s7_type.is_struct and variable.value is None:
                continue
            click.echo(f"{path} = {variable.value!r} [{variable.status_code.value}]")
    finally:
        await service.disconnect()


@click.command()
@click.argument("endpoint")
@click.option("-u", "--username", default=None, help="User name for the session.")
@click.option("-p", "--password", default=None, help="Password for the session.")
@click.option("-s", "--sessions", default=2, show_default=True, help="Number of sessions to open.")
@click.option("-v", "--verbose", is_flag=True, help="Also print debug-output.")
@click.version_option(__version__)
@click.help_option("-h", "--help")
def main(endpoint, username, password, sessions, verbose):
    """Print all variables of the PLC at ENDPOINT, e.g. opc.tcp://192.168.0.1:4840."""

    # setup logging
    if verbose:
        logging.basicConfig(format="[%(levelname)s]: %(message)s", level=logging.DEBUG)
    else:
        logging.basicConfig(format="[%(levelname)s]: %(message)s", level=logging.INFO)

    try:
        config = ClientConfig(max_sessions=sessions, username=username, password=password)
    except ValueError as e:
        raise click.BadParameter(str(e))

    try:
        asyncio.run(browse(endpoint, config))
    except S7UaError as e:
        logger.error(e)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
