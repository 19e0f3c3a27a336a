try:
    import json
    import os
    import yaml
    from json.decoder import JSONDecodeError
    from e2ecore.errors import ConfigurationError

except ImportError as imp_err:
    print('There was an error importing files - From %s' % __file__)
    print('\n---{{{ Failed - ' + format(imp_err) + ' }}}---\n')
    raise


def read_config_file(file):
    """
    Read config file, supporting config files:
    - yaml
    - json
    :param file: (str) file path
    :return: python-format of the file content
    """
    with open(file, 'r', encoding='utf-8') as f:
        content = f.read()
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError:
        try:
            return json.loads(content)
        except JSONDecodeError:
            raise ConfigurationError(f'The config file type of `{file}` is not supported or the config syntax got errors.') from None


def env_value(environ, key, default=None):
    """
    Read a variable from an environment mapping, treating blank values as unset.
    :param environ: (Mapping) usually os.environ
    :param key: (str) variable name
    :param default: (Any) value returned when the variable is missing or blank
    :return: (str) stripped value or default
    """
    if environ is None:
        environ = os.environ
    value = environ.get(key)
    if value is None or not str(value).strip():
        return default
    return str(value).strip()
