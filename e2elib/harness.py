try:
    from e2ecore import environment
    from e2ecore.appium_server import DEFAULT_LOG_PATH, DEFAULT_SETTLE_DELAY, start_local_server
    from e2ecore.config_handler import ConfigHandler
    from e2ecore.driver import SessionDriverFactory
    from e2ecore.logger import Logger

except ImportError as imp_err:
    print('There was an error importing files - From %s' % __file__)
    print('\n---{{{ Failed - ' + format(imp_err) + ' }}}---\n')
    raise


class Harness:
    """
    One test run: resolve the context, start the local Appium server when needed,
    open the device session. The test suite owns the returned session and must
    call teardown() (or use the harness as a context manager).
    """

    def __init__(self, environ=None, strict=False, factory=None,
                 server_log=DEFAULT_LOG_PATH, settle_delay=DEFAULT_SETTLE_DELAY,
                 start_server=start_local_server):
        self.logger = Logger()
        self.environ = environ
        self.strict = strict
        self.factory = factory or SessionDriverFactory(server_configs=ConfigHandler(environ=environ))
        self.server_log = server_log
        self.settle_delay = settle_delay
        self._start_server = start_server
        self.context = None
        self.server = None
        self.session = None

    def setup(self, cancel_event=None):
        """
        Bring everything up. If session creation fails the server (if any) stays on
        `self.server` so teardown() can still release it.
        :param cancel_event: (threading.Event) optional, aborts session readiness waits
        :return: (RemoteSession) ready session
        """
        self.context = environment.resolve(self.environ, strict=self.strict)
        if self.context.is_local and self.server is None:
            self.server = self._start_server(self.context.server_port, log_path=self.server_log,
                                             settle_delay=self.settle_delay)
        try:
            self.session = self.factory.create_session(self.context, cancel_event=cancel_event)
        except Exception as ex:
            self.logger.error(f'Session creation failed: {ex}')
            raise
        return self.session

    def teardown(self):
        """Quit the session and stop the server. Errors are logged, never raised."""
        if self.session is not None:
            try:
                self.session.quit()
            except Exception as ex:
                self.logger.error(f'Error while quitting session: {ex}')
            finally:
                self.session = None
        if self.server is not None:
            try:
                if not self.server.shutdown():
                    self.logger.warning(f'Appium server on port {self.server.port} may still be running')
            except Exception as ex:
                self.logger.error(f'Error while stopping Appium server: {ex}')
            finally:
                self.server = None

    def __enter__(self):
        try:
            return self.setup()
        except BaseException:
            self.teardown()
            raise

    def __exit__(self, exc_type, exc, tb):
        self.teardown()
