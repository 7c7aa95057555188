"""Process launcher interface.

Credential resolution shells out to cloudflared. The launcher is handed to
the resolver at construction time so that tests can substitute scripted
outcomes for real processes.
"""

from __future__ import annotations

import logging
import os
import queue
import signal
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from typing import Sequence

from ..errors import LaunchError, LaunchTimeout

logger = logging.getLogger(__name__)


class Deadline:
    """ A point in time, *timeout* seconds from now, after which any work
        bound to this :class:`Deadline` should be abandoned. A deadline can
        also be cancelled early via :func:`cancel`, which has the same effect
        as it expiring.
    """

    def __init__(self, timeout):

        self.timeout = float(timeout)
        self.expiry = time.monotonic() + self.timeout
        self.cancelled = threading.Event()


    def cancel(self):
        self.cancelled.set()


    def expired(self):
        return self.remaining() <= 0


    def remaining(self):
        """ Return the number of seconds left before expiry; zero if the
            deadline has passed or was cancelled.
        """

        if self.cancelled.is_set():
            return 0.0

        remaining = self.expiry - time.monotonic()

        if remaining < 0:
            remaining = 0.0

        return remaining


    def wait(self, timeout=None):
        """ Block until the deadline expires or is cancelled, or for at most
            *timeout* seconds. Returns True if the deadline has expired.
        """

        if timeout is None:
            until = None
        else:
            until = time.monotonic() + timeout

        # Event.wait() may return marginally early; keep waiting until one
        # of the two limits has actually passed.

        while True:
            delay = self.remaining()
            if delay <= 0:
                return True

            if until is not None:
                left = until - time.monotonic()
                if left <= 0:
                    return False
                if left < delay:
                    delay = left

            self.cancelled.wait(delay)


# end of class Deadline



class ProcessLauncher(ABC):
    """Minimal contract for running one external command."""

    @abstractmethod
    def run(self, arguments: Sequence[str], deadline: Deadline, stderr=None) -> str:
        """ Run *arguments* to completion and return its standard output.
            Lines written to standard error are passed to ``stderr.write()``
            as they arrive, or discarded if *stderr* is None.

            Raises :class:`aptcfd.errors.LaunchError` if the command cannot be
            started or exits non-zero, and
            :class:`aptcfd.errors.LaunchTimeout` if *deadline* expires first.
        """



class _Reader:
    """ Background thread that forwards each line read from *stream* to the
        *lines* queue as a ``(name, line)`` tuple, followed by
        ``(name, None)`` once the stream is exhausted. The thread owns the
        stream and closes it when done.
    """

    def __init__(self, name: str, stream, lines: queue.Queue):

        self.name = name
        self.stream = stream
        self.lines = lines

        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def join(self, timeout=None) -> None:
        self.thread.join(timeout)


    def run(self) -> None:

        try:
            for line in self.stream:
                self.lines.put((self.name, line))
        except (OSError, ValueError) as e:
            logger.debug('error reading %s: %s', self.name, e)
        finally:
            self.stream.close()
            self.lines.put((self.name, None))


# end of class _Reader



class SubprocessLauncher(ProcessLauncher):
    """ Run commands with :mod:`subprocess`, one at a time. The pipes are
        read by background threads so that the deadline is enforced here,
        even if some descendant of the command holds the pipes open.
    """

    interval = 0.05

    def run(self, arguments: Sequence[str], deadline: Deadline, stderr=None) -> str:

        arguments = list(arguments)
        name = arguments[0]

        if deadline.expired():
            raise LaunchTimeout('deadline expired before %s could start' % (name))

        if stderr is None:
            errpipe = subprocess.DEVNULL
        else:
            errpipe = subprocess.PIPE

        try:
            process = subprocess.Popen(
                arguments,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=errpipe,
                encoding='utf-8',
                errors='replace',
                start_new_session=True,
            )
        except OSError as e:
            raise LaunchError('cannot run %s: %s' % (name, e))

        lines = queue.Queue()
        readers = list()
        readers.append(_Reader('stdout', process.stdout, lines))

        if process.stderr is not None:
            readers.append(_Reader('stderr', process.stderr, lines))

        output = list()
        pending = len(readers)

        while pending > 0:
            remaining = deadline.remaining()

            if remaining <= 0:
                self.kill(process)
                raise LaunchTimeout('%s did not finish within %.0f seconds' % (name, deadline.timeout), process.returncode)

            try:
                source, line = lines.get(timeout=min(remaining, self.interval))
            except queue.Empty:
                continue

            if line is None:
                pending -= 1
            elif source == 'stdout':
                output.append(line)
            else:
                stderr.write(line)

        for reader in readers:
            reader.join()

        try:
            returncode = process.wait(timeout=deadline.remaining())
        except subprocess.TimeoutExpired:
            self.kill(process)
            raise LaunchTimeout('%s did not finish within %.0f seconds' % (name, deadline.timeout), process.returncode)

        if returncode != 0:
            raise LaunchError('%s exited with status %d' % (name, returncode), returncode)

        return ''.join(output)


    def kill(self, process: subprocess.Popen) -> None:

        # The command may be su(1), whose child runs the real program; take
        # down the whole process group, not just the immediate child.

        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass

        process.wait()


# end of class SubprocessLauncher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
