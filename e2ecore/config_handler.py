try:
    import os
    from pathlib import Path
    from e2ecore import utils
    from e2ecore.errors import ConfigurationError

except ImportError as imp_err:
    print('There was an error importing files - From %s' % __file__)
    print('\n---{{{ Failed - ' + format(imp_err) + ' }}}---\n')
    raise


class ConfigHandler:
    SERVER_CONFIG_FILE = 'server_configs.yaml'

    def __init__(self, config_file=None, environ=None):
        project_root = Path(__file__).resolve().parent.parent
        self.CONFIG_DIR = project_root / 'config'
        self.environ = os.environ if environ is None else environ
        override = utils.env_value(self.environ, 'HARNESS_SERVER_CONFIG')
        self.config_file = Path(config_file or override or self.CONFIG_DIR / self.SERVER_CONFIG_FILE)
        self._configs = None

    @property
    def server_configs(self):
        if self._configs is None:
            if not self.config_file.is_file():
                raise ConfigurationError(f'Server config file not found: {self.config_file}')
            configs = utils.read_config_file(self.config_file)
            if not isinstance(configs, dict):
                raise ConfigurationError(f'Server config file `{self.config_file}` must hold a mapping')
            self._configs = configs
        return self._configs

    def get_server_config(self, environment):
        """
        Get the endpoint settings of an execution environment.
        `username_env` / `access_key_env` are replaced by the values of the variables they name.
        :param environment: (str) `local` or `sauce`
        :return: (dict) server config
        """
        section = self.server_configs.get(environment)
        if not isinstance(section, dict):
            raise ConfigurationError(f'No `{environment}` section in {self.config_file}')
        config = dict(section)
        for key, target in (('username_env', 'username'), ('access_key_env', 'access_key')):
            variable = config.pop(key, None)
            if variable:
                config[target] = utils.env_value(self.environ, variable)
        return config
