"""Process channel - a spawned plugin process with line-oriented stdin/stdout."""

import logging
import queue
import subprocess
import threading
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

logger = logging.getLogger(__name__)

# Marks the end of the stdout stream in the line queue
_EOF = object()


class ProcessChannel:
    """Owns one plugin subprocess and its three standard streams.

    stdout is drained by a reader thread into a queue, so ``read_line`` can
    wait with a deadline. stderr is drained by a second thread and only ever
    logged. A third thread watches for process exit and closes the channel;
    after that, writes fail and reads return None without blocking.
    """

    def __init__(self, proc: subprocess.Popen, name: str):
        self.proc = proc
        self.name = name
        self._lines: "queue.Queue[object]" = queue.Queue()
        self._write_lock = threading.Lock()
        self._closed = threading.Event()

        self._stdout_reader = threading.Thread(
            target=self._read_stdout, name=f"plugin-{name}-stdout", daemon=True
        )
        self._stderr_reader = threading.Thread(
            target=self._read_stderr, name=f"plugin-{name}-stderr", daemon=True
        )
        self._exit_watch = threading.Thread(
            target=self._watch_exit, name=f"plugin-{name}-watch", daemon=True
        )
        self._stdout_reader.start()
        self._stderr_reader.start()
        self._exit_watch.start()

    @classmethod
    def spawn(
        cls,
        executable: Union[str, Path],
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
    ) -> Optional["ProcessChannel"]:
        """Start a plugin process.

        Args:
            executable: Program to run
            args: Extra command line arguments
            env: Environment for the child (inherits ours when None)

        Returns:
            ProcessChannel if the process started, None otherwise
        """
        argv = [str(executable), *args]
        logger.info(f"Spawning process for {executable}")
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                env=env,
            )
        except (OSError, ValueError) as e:
            logger.error(f"Failed to spawn {executable}: {e}")
            return None

        return cls(proc, Path(executable).name)

    @property
    def pid(self) -> int:
        return self.proc.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.proc.returncode

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def write_line(self, text: str) -> bool:
        """Write one line to the plugin's stdin.

        Returns:
            True if the line was written, False if the channel is closed or the
            pipe broke
        """
        if self.closed:
            logger.warning(f"Plugin {self.name} ({self.pid}): channel closed, dropping {text!r}")
            return False

        with self._write_lock:
            try:
                self.proc.stdin.write(text + "\n")
                self.proc.stdin.flush()
                return True
            except (OSError, ValueError) as e:
                logger.warning(f"Plugin {self.name} ({self.pid}): write failed: {e}")
                return False

    def read_line(self, timeout: Optional[float] = None) -> Optional[str]:
        """Wait for one line from the plugin's stdout.

        Args:
            timeout: Seconds to wait; None waits until a line arrives or the
                stream closes

        Returns:
            The line without its terminator, or None on close or timeout
        """
        try:
            line = self._lines.get(timeout=timeout)
        except queue.Empty:
            logger.warning(f"Plugin {self.name} ({self.pid}): no response within {timeout}s")
            return None

        if line is _EOF:
            # Keep the marker so later reads fail fast
            self._lines.put(_EOF)
            return None
        return line

    def discard_pending(self) -> int:
        """Drop lines already received but never read (late replies)."""
        dropped = 0
        while True:
            try:
                line = self._lines.get_nowait()
            except queue.Empty:
                break
            if line is _EOF:
                self._lines.put(_EOF)
                break
            dropped += 1
            logger.debug(f"Plugin {self.name} ({self.pid}): discarding stale line {line!r}")
        return dropped

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait until the exit watch has closed the channel.

        Returns:
            True if the process exited within the timeout
        """
        return self._closed.wait(timeout)

    def terminate(self) -> None:
        """Send SIGTERM unless the process is already gone."""
        if self.proc.poll() is None:
            logger.warning(f"Plugin {self.name} ({self.pid}): terminating")
            self.proc.terminate()

    def kill(self) -> None:
        """Send SIGKILL unless the process is already gone."""
        if self.proc.poll() is None:
            logger.warning(f"Plugin {self.name} ({self.pid}): killing")
            self.proc.kill()

    def _read_stdout(self) -> None:
        stdout = self.proc.stdout
        try:
            for line in stdout:
                self._lines.put(line.rstrip("\r\n"))
        except (OSError, ValueError) as e:
            logger.debug(f"Plugin {self.name} ({self.pid}): stdout closed: {e}")
        finally:
            stdout.close()

    def _read_stderr(self) -> None:
        stderr = self.proc.stderr
        try:
            for line in stderr:
                line = line.rstrip("\r\n")
                if line:
                    logger.warning(f"Plugin {self.name} ({self.pid}) stderr: {line}")
        except (OSError, ValueError) as e:
            logger.debug(f"Plugin {self.name} ({self.pid}): stderr closed: {e}")
        finally:
            stderr.close()

    def _watch_exit(self) -> None:
        status = self.proc.wait()
        logger.info(f"Closing plugin {self.name} ({self.pid}): exit status {status}")
        self._closed.set()

        with self._write_lock:
            try:
                self.proc.stdin.close()
            except OSError as e:
                logger.debug(f"Plugin {self.name} ({self.pid}): stdin close failed: {e}")

        # Let lines written just before exit reach the queue ahead of the marker
        self._stdout_reader.join(timeout=1.0)
        self._lines.put(_EOF)
