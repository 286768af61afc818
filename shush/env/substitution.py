"""Decrypt prefixed environment variables and hand them to a child process.

A variable named ``<prefix><NAME>`` holding a ciphertext token is removed
and replaced by ``<NAME>`` holding the plaintext. Variables are handled one
at a time; the first failure aborts the whole run before any child is
started. An interrupt mid-pass leaves already processed variables in
their substituted state.
"""
import logging
import subprocess
from typing import List

from shush.config import DEFAULT_PREFIX
from shush.env.store import EnvironmentStore
from shush.errors import ProcessSpawnFailure, ShushError, SubstitutionError
from shush.kms.gateway import KmsGateway

logger = logging.getLogger(__name__)


def exit_code_from_returncode(returncode: int) -> int:
    """Map a subprocess return code to a shell style exit status."""
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


class EnvSubstitutionEngine:
    def __init__(self, gateway: KmsGateway, store: EnvironmentStore,
                 prefix: str = DEFAULT_PREFIX, no_padding: bool = False):
        if not prefix:
            raise ValueError("prefix must not be empty")
        self.gateway = gateway
        self.store = store
        self.prefix = prefix
        self.no_padding = no_padding

    def substitute(self) -> List[str]:
        """Replace every non-empty prefixed variable by its plaintext.

        Returns the names of the installed variables. Raises
        SubstitutionError naming the first variable that could not be
        decrypted; later variables are left as they were.
        """
        installed = []
        for name, value in sorted(self.store.items()):
            if not name.startswith(self.prefix):
                continue
            if value == "":
                logger.debug("Skipping %s: empty value", name)
                continue

            # Gone before decrypting so a failure never leaks the ciphertext.
            self.store.remove(name)

            target = name[len(self.prefix):]
            if not target:
                raise SubstitutionError(
                    name, f"Could not decrypt key {name}, variable name is empty after removing prefix")
            if target.startswith(self.prefix):
                # Installing it would shadow a candidate that is still pending.
                raise SubstitutionError(
                    name, f"Could not decrypt key {name}, name still carries prefix {self.prefix} after removing it")

            try:
                result = self.gateway.decrypt(value, self.no_padding)
            except ShushError as e:
                raise SubstitutionError(name, f"Could not decrypt key {name}, {e}") from e

            if self.store.get(target) is not None:
                logger.debug("Overwriting existing variable %s", target)
            try:
                self.store.set(target, result.plaintext)
            except ValueError as e:
                # e.g. a NUL byte, which no process environment can hold
                raise SubstitutionError(name, f"Could not decrypt key {name}, {e}") from e
            installed.append(target)
            logger.info("Decrypted %s into %s", name, target)
        return installed

    def run(self, command: str, args: List[str]) -> int:
        """Substitute, then run `command` with the resulting environment.

        stdin/stdout/stderr are inherited. Returns the child's exit code,
        or 128 + signal number when it was killed by a signal.
        """
        self.substitute()
        env = self.store.snapshot()
        logger.debug("Launching %s", command)
        try:
            proc = subprocess.Popen([command, *args], env=env)
        except (OSError, ValueError) as e:
            raise ProcessSpawnFailure(f"Could not launch {command}: {e}") from e

        try:
            returncode = proc.wait()
        except KeyboardInterrupt:
            # The child got the same SIGINT from the terminal; wait for it to finish.
            returncode = proc.wait()
        code = exit_code_from_returncode(returncode)
        if returncode < 0:
            logger.info("%s terminated by signal %d", command, -returncode)
        return code
