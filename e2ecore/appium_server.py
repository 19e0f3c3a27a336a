try:
    import os
    import shutil
    import signal
    import subprocess
    import threading
    import time
    from pathlib import Path
    from e2ecore.errors import ServerSpawnError
    from e2ecore.logger import Logger

except ImportError as imp_err:
    print('There was an error importing files - From %s' % __file__)
    print('\n---{{{ Failed - ' + format(imp_err) + ' }}}---\n')
    raise

DEFAULT_EXECUTABLE = 'appium'
DEFAULT_LOG_PATH = './appium-out.log'
DEFAULT_SETTLE_DELAY = 5.0
DEFAULT_SHUTDOWN_TIMEOUT = 10.0
POLL_INTERVAL = 0.25

_claimed_ports = set()
_ports_lock = threading.Lock()


def _claim_port(port):
    with _ports_lock:
        if port in _claimed_ports:
            return False
        _claimed_ports.add(port)
        return True


def _release_port(port):
    with _ports_lock:
        _claimed_ports.discard(port)


def _detach_kwargs():
    # keep the server alive if the harness dies, but in its own group so it can be signalled as a whole
    if os.name == 'nt':
        return {'creationflags': subprocess.CREATE_NEW_PROCESS_GROUP}
    return {'start_new_session': True}


class ServerProcessHandle:
    """
    Ownership of a running local Appium server: the process, its port and its log file.
    Call shutdown() (or use it as a context manager) to release everything.
    """

    def __init__(self, process, port, log_file, log_path, logger=None):
        self.process = process
        self.port = port
        self.log_path = Path(log_path)
        self._log_file = log_file
        self.logger = logger or Logger()

    @property
    def pid(self):
        return self.process.pid

    @property
    def log_closed(self):
        return self._log_file is None or self._log_file.closed

    def is_alive(self):
        return self.process.poll() is None

    def _terminate(self, timeout):
        if not self.is_alive():
            self.logger.info(f'Appium server (pid {self.pid}) already exited with code {self.process.returncode}')
            return
        self.logger.info(f'Stopping Appium server (pid {self.pid}) on port {self.port}')
        if os.name == 'nt':
            self.process.terminate()
        else:
            os.killpg(self.process.pid, signal.SIGTERM)
        try:
            self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self.logger.warning(f'Appium server (pid {self.pid}) did not stop in {timeout}s; killing it')
            if os.name == 'nt':
                self.process.kill()
            else:
                os.killpg(self.process.pid, signal.SIGKILL)
            self.process.wait(timeout=timeout)

    def shutdown(self, timeout=DEFAULT_SHUTDOWN_TIMEOUT):
        """
        Terminate the server and close its log. Never raises.
        :param timeout: (float) seconds to wait for a graceful exit before killing
        :return: (bool) True if the process is gone and the log is closed
        """
        stopped = True
        try:
            self._terminate(timeout)
        except ProcessLookupError:
            self.logger.info(f'Appium server (pid {self.pid}) has already exited')
        except Exception as ex:
            stopped = False
            self.logger.error(f'Failed to stop Appium server (pid {self.pid}): {ex}')
        finally:
            try:
                if self._log_file is not None:
                    self._log_file.close()
            except Exception as ex:
                stopped = False
                self.logger.error(f'Failed to close Appium log {self.log_path}: {ex}')
            if self.is_alive():
                self.logger.warning(f'Keeping port {self.port} claimed, Appium server (pid {self.pid}) is still running')
            else:
                _release_port(self.port)
        return stopped and not self.is_alive()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()

    def __repr__(self):
        return f'<ServerProcessHandle pid={self.pid} port={self.port} alive={self.is_alive()}>'


def start_local_server(port, executable=DEFAULT_EXECUTABLE, log_path=DEFAULT_LOG_PATH,
                       settle_delay=DEFAULT_SETTLE_DELAY, logger=None):
    """
    Spawn a local Appium server and wait for it to settle.
    stdout and stderr are appended to `log_path`, stdin is not connected.
    :param port: (int) port the server listens on
    :param executable: (str) Appium executable, looked up on PATH
    :param log_path: (str) server log file
    :param settle_delay: (float) seconds to wait for the server to bind and initialize
    :param logger: (Logger) optional logger
    :return: (ServerProcessHandle)
    """
    logger = logger or Logger()
    resolved = shutil.which(executable)
    if resolved is None:
        raise ServerSpawnError(f'Appium executable `{executable}` not found in PATH')

    if not _claim_port(port):
        raise ServerSpawnError(f'A local Appium server was already started on port {port}')

    log_file = None
    process = None
    try:
        try:
            log_file = open(log_path, 'ab')
        except OSError as ex:
            raise ServerSpawnError(f'Cannot open Appium log {log_path}: {ex}') from ex
        cmd = [resolved, '-p', str(port)]
        logger.info(f"Starting Appium server: {' '.join(cmd)} (log: {log_path})")
        try:
            process = subprocess.Popen(cmd, stdin=subprocess.DEVNULL, stdout=log_file,
                                       stderr=subprocess.STDOUT, close_fds=True, **_detach_kwargs())
        except OSError as ex:
            raise ServerSpawnError(f'Could not spawn `{resolved}`: {ex}') from ex

        deadline = time.monotonic() + settle_delay
        while True:
            code = process.poll()
            if code is not None:
                raise ServerSpawnError(f'Appium server exited with code {code} during startup; see {log_path}')
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            time.sleep(min(POLL_INTERVAL, remaining))
    except BaseException:
        if process is not None and process.poll() is None:
            process.kill()
            process.wait()
        if log_file is not None:
            log_file.close()
        _release_port(port)
        raise

    logger.info(f'Appium server running (pid {process.pid}) on port {port}')
    return ServerProcessHandle(process, port, log_file, log_path, logger=logger)
