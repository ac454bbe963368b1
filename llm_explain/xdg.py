"""XDG Base Directory helpers.

llm-explain keeps its config file and the recorded session log under the
XDG config directory (~/.config/llm-explain by default).
"""
import os
from pathlib import Path

APP_NAME = 'llm-explain'


def get_config_dir(app_name: str = APP_NAME) -> Path:
    """Get application config directory using XDG spec.

    Returns:
        Path to XDG_CONFIG_HOME/app_name or ~/.config/app_name
    """
    xdg_config = os.environ.get('XDG_CONFIG_HOME')
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / '.config'
    return base / app_name


def get_config_file(app_name: str = APP_NAME) -> Path:
    """Path to the KEY=VALUE config file."""
    return get_config_dir(app_name) / 'config'


def get_session_log_path(app_name: str = APP_NAME) -> Path:
    """Default path of the script(1) session transcript."""
    return get_config_dir(app_name) / 'logs' / 'terminal_session.log'
