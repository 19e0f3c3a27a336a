import argparse
import os
import sys
import time
from datetime import datetime

from selenium.common.exceptions import WebDriverException

from e2ecore.errors import HarnessError
from e2ecore.logger import Logger
from e2elib.harness import Harness


def setup_run_logger():
    """
    Create a dedicated logger for this run, writing to logs_run/
    """
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_filename = f"run_session_{timestamp}.log"
    run_logger = Logger(name=f"run_session_{timestamp}", filename=log_filename, dir_name="logs_run")
    print(f"📝 Run session log: {run_logger.log_path}")
    run_logger.info(f"=== RUN SESSION STARTED at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} ===")
    return run_logger


def log_and_print(run_logger, message, level="info"):
    """
    Helper function to log and print
    """
    print(message)
    if level == "info":
        run_logger.info(message)
    elif level == "warning":
        run_logger.warning(message)
    elif level == "error":
        run_logger.error(message)


def build_environ(arguments, base=None):
    """
    Overlay command line flags on the process environment
    :param arguments: (argparse.Namespace)
    :param base: (Mapping) environment to start from, os.environ if None
    :return: (dict) environment mapping for the harness
    """
    environ = dict(os.environ if base is None else base)
    for flag, variable in (('platform', 'TEST_RN_PLATFORM'), ('env', 'TEST_ENV'), ('port', 'APPIUM_PORT')):
        value = getattr(arguments, flag, None)
        if value is not None:
            environ[variable] = str(value)
    if arguments.app:
        platform = environ.get('TEST_RN_PLATFORM', 'android').lower()
        environ['IOS_APP_PATH' if platform == 'ios' else 'ANDROID_APP_PATH'] = arguments.app
    return environ


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Open a device session, print its status and tear it down.\n')
    parser.add_argument('--platform', choices=['android', 'ios'], help='target platform (TEST_RN_PLATFORM)')
    parser.add_argument('--env', help='execution environment: local or sauce (TEST_ENV)')
    parser.add_argument('--port', type=int, help='local Appium server port (APPIUM_PORT)')
    parser.add_argument('--app', help='local app build to install')
    parser.add_argument('--strict', action='store_true', help='fail on unrecognized environment values')
    parser.add_argument('--keep-alive', type=float, default=0, help='seconds to keep the session open')
    return parser.parse_args(argv)


def main(argv=None):
    arguments = parse_args(argv)
    run_logger = setup_run_logger()
    harness = Harness(environ=build_environ(arguments), strict=arguments.strict)
    start = time.time()
    try:
        session = harness.setup()
        log_and_print(run_logger, f"Context: {harness.context}")
        log_and_print(run_logger, f"Session {session.session_id} ready in {time.time() - start:.2f} seconds")
        log_and_print(run_logger, f"Driver status: {session.status()}")
        if arguments.keep_alive:
            log_and_print(run_logger, f"Keeping session open for {arguments.keep_alive}s")
            time.sleep(arguments.keep_alive)
        return 0
    except (HarnessError, WebDriverException) as ex:
        log_and_print(run_logger, f"Run failed: {ex}", "error")
        return 1
    finally:
        harness.teardown()
        log_and_print(run_logger, "=== RUN SESSION END ===")


if __name__ == '__main__':
    sys.exit(main())
