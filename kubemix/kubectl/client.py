"""Async wrapper around a single kubectl process invocation."""

from __future__ import annotations

import asyncio
import shlex
from collections.abc import Sequence
from typing import TYPE_CHECKING

from kubemix.errors import QueryFailedError, ToolNotExecutableError, ToolNotFoundError
from kubemix.models.resources import QueryResult
from kubemix.observability.logging import get_logger

if TYPE_CHECKING:
    import structlog

    from kubemix.models.config import KubernetesConfig


class KubectlClient:
    """Runs kubectl with the configured kubeconfig/context prefix.

    Every call is attempted exactly once. Zero matching resources is a
    successful empty result, not an error.
    """

    def __init__(
        self,
        binary: str = "kubectl",
        kubeconfig: str | None = None,
        context: str | None = None,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._binary = binary
        self._kubeconfig = kubeconfig
        self._context = context
        self._log = log or get_logger("kubectl")

    @classmethod
    def from_config(
        cls,
        config: KubernetesConfig,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> KubectlClient:
        return cls(
            binary=config.binary,
            kubeconfig=config.kubeconfig_path,
            context=config.context,
            log=log,
        )

    def build_argv(self, args: Sequence[str]) -> list[str]:
        argv = [self._binary]
        if self._kubeconfig:
            argv += ["--kubeconfig", self._kubeconfig]
        if self._context:
            argv += ["--context", self._context]
        argv += list(args)
        return argv

    def invocation(self, args: Sequence[str]) -> str:
        """Return the exact command line ``invoke(args)`` would run."""
        return shlex.join(self.build_argv(args))

    async def invoke(self, args: Sequence[str]) -> QueryResult:
        """Run kubectl and return its stdout.

        Raises:
            ToolNotFoundError: the binary is not installed, or cannot be executed
                (``ToolNotExecutableError``).
            QueryFailedError: the process exited non-zero.
        """
        argv = self.build_argv(args)
        command = shlex.join(argv)
        self._log.debug("kubectl_exec", command=command)

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            self._log.error("kubectl_not_found", binary=self._binary, command=command)
            raise ToolNotFoundError(self._binary, command) from exc
        except OSError as exc:
            # present but not runnable: missing exec bit, bad interpreter, a directory
            self._log.error("kubectl_not_executable", binary=self._binary, command=command, error=str(exc))
            raise ToolNotExecutableError(self._binary, command, exc.strerror or str(exc)) from exc

        stdout_b, stderr_b = await proc.communicate()
        stdout = stdout_b.decode("utf-8", errors="replace")
        stderr = stderr_b.decode("utf-8", errors="replace")

        if proc.returncode != 0:
            self._log.debug(
                "kubectl_failed",
                command=command,
                returncode=proc.returncode,
                stderr=stderr.strip()[:500],
            )
            raise QueryFailedError(stderr, command, proc.returncode or 1)

        if stderr.strip():
            # kubectl reports "No resources found" on stderr with exit 0
            self._log.debug("kubectl_stderr", command=command, stderr=stderr.strip()[:500])

        return QueryResult(text=stdout, invocation=command)
