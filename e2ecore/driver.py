"""
Open a ready-to-use Appium session for an execution context.

After the session is initialized the device gets a coarse settle delay and an
app load pause, then the status endpoint is polled with exponential backoff
until it answers successfully or the status deadline passes. Only then is the
implicit wait configured and the session handed back.
"""
try:
    import time
    from dataclasses import dataclass
    from urllib.parse import quote
    from e2ecore import caps
    from e2ecore.config_handler import ConfigHandler
    from e2ecore.environment import LOCAL
    from e2ecore.errors import SessionCancelled, SessionInitError
    from e2ecore.logger import Logger
    from e2ecore.session import RemoteSession

except ImportError as imp_err:
    print('There was an error importing files - From %s' % __file__)
    print('\n---{{{ Failed - ' + format(imp_err) + ' }}}---\n')
    raise

DEFAULT_RUN_NAME = 'Gutenberg Editor Tests[{platform}]'
DEFAULT_TAGS = ('Gutenberg',)


@dataclass(frozen=True)
class ReadinessPolicy:
    initial_settle: float = 10.0      # seconds, right after session init
    app_load_ms: int = 10000          # device-side sleep for the app to load
    status_timeout: float = 60.0      # deadline for a successful status response
    poll_interval: float = 1.0        # first wait between status polls
    backoff: float = 2.0
    max_poll_interval: float = 8.0
    implicit_wait_ms: int = 2000
    final_settle: float = 3.0


def _status_ok(status):
    # Appium answers {"ready": true, ...}; older servers only send build info
    if isinstance(status, dict) and status.get('ready') is False:
        return False
    return status is not None


class SessionDriverFactory:
    def __init__(self, server_configs=None, policy=None, session_class=RemoteSession, logger=None):
        """
        :param server_configs: (ConfigHandler) or (dict) mapping environment name to server config
        :param policy: (ReadinessPolicy) waits applied while the session comes up
        :param session_class: callable building a session from a command executor URL
        :param logger: (Logger) optional logger
        """
        self.server_configs = server_configs if server_configs is not None else ConfigHandler()
        self.policy = policy or ReadinessPolicy()
        self.session_class = session_class
        self.logger = logger or Logger()

    def get_server_config(self, environment):
        if isinstance(self.server_configs, ConfigHandler):
            return self.server_configs.get_server_config(environment)
        return dict(self.server_configs.get(environment) or {})

    def build_capabilities(self, context):
        """
        Compose the capability payload of a session
        :param context: (ExecutionContext)
        :return: (dict) capabilities, a fresh copy of the platform profile
        """
        desired_caps = caps.get_profile(context.platform)
        desired_caps['app'] = context.app_location
        if not context.is_local:
            config = self.get_server_config(context.environment)
            run_name = config.get('run_name') or DEFAULT_RUN_NAME
            desired_caps['name'] = run_name.format(platform=context.platform)
            desired_caps['tags'] = list(config.get('tags') or DEFAULT_TAGS)
        return desired_caps

    def command_executor(self, context):
        """
        URL of the Appium endpoint for a context: the local server on the context port, or the remote grid
        :param context: (ExecutionContext)
        :return: (str) URL
        """
        config = self.get_server_config(context.environment)
        protocol = config.get('protocol', 'http')
        host = config.get('host', 'localhost')
        port = context.server_port if context.environment == LOCAL else config.get('port')
        path = config.get('path') or ''
        credentials = ''
        if config.get('username'):
            credentials = quote(config['username'], safe='')
            if config.get('access_key'):
                credentials += ':' + quote(config['access_key'], safe='')
            credentials += '@'
        netloc = f'{credentials}{host}:{port}' if port else f'{credentials}{host}'
        return f'{protocol}://{netloc}{path}'

    def _pause(self, seconds, cancel_event):
        if seconds <= 0:
            return
        if cancel_event is None:
            time.sleep(seconds)
        elif cancel_event.wait(seconds):
            raise SessionCancelled('Session setup cancelled')

    def _check_cancelled(self, cancel_event):
        if cancel_event is not None and cancel_event.is_set():
            raise SessionCancelled('Session setup cancelled')

    def wait_until_ready(self, session, cancel_event=None):
        """
        Poll the session status until it reports success
        :param session: (RemoteSession) initialized session
        :param cancel_event: (threading.Event) optional, aborts the wait when set
        :return: the first successful status response
        """
        policy = self.policy
        deadline = time.monotonic() + policy.status_timeout
        interval = policy.poll_interval
        attempt = 0
        last_error = None
        while True:
            self._check_cancelled(cancel_event)
            attempt += 1
            try:
                status = session.status()
            except Exception as ex:
                status, last_error = None, ex
                self.logger.warning(f'Status query #{attempt} failed: {ex}')
            else:
                self.logger.info(f'Status #{attempt}: {status}')
                if _status_ok(status):
                    return status
                last_error = None
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                reason = f': {last_error}' if last_error else f' (last status: {status})'
                raise SessionInitError(
                    f'Session not ready after {policy.status_timeout}s and {attempt} status queries{reason}')
            self._pause(min(interval, remaining), cancel_event)
            interval = min(interval * policy.backoff, policy.max_poll_interval)

    def create_session(self, context, cancel_event=None):
        """
        Open a session for the context and wait for the device/app to be usable.
        :param context: (ExecutionContext)
        :param cancel_event: (threading.Event) optional, aborts any pending wait when set
        :return: (RemoteSession) ready session, owned by the caller
        """
        desired_caps = self.build_capabilities(context)
        executor = self.command_executor(context)
        session = self.session_class(executor)
        self.logger.info(f'Opening {context.platform} session on {context.environment} ({executor.split("@")[-1]})')
        try:
            session.init(desired_caps)
        except SessionInitError:
            raise
        except Exception as ex:
            raise SessionInitError(f'Session initialization failed: {ex}') from ex

        try:
            self._pause(self.policy.initial_settle, cancel_event)
            self._check_cancelled(cancel_event)
            session.sleep(self.policy.app_load_ms, cancel_event=cancel_event)  # wait for app to load
            status = self.wait_until_ready(session, cancel_event)
            self.logger.info(f'Session ready, driver status: {status}')
            session.set_implicit_wait_timeout(self.policy.implicit_wait_ms)
            self._pause(self.policy.final_settle, cancel_event)
        except BaseException as ex:
            self.logger.error(f'Session setup failed, quitting session: {ex}')
            try:
                session.quit()
            except Exception as quit_ex:
                self.logger.warning(f'Ignoring error while quitting half-initialized session: {quit_ex}')
            if isinstance(ex, Exception) and not isinstance(ex, SessionInitError):
                raise SessionInitError(f'Session setup failed: {ex}') from ex
            raise
        return session


def setup_driver(context, server_configs=None, policy=None, cancel_event=None):
    """Shortcut for SessionDriverFactory(...).create_session(context)."""
    factory = SessionDriverFactory(server_configs=server_configs, policy=policy)
    return factory.create_session(context, cancel_event=cancel_event)
