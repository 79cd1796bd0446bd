"""
Tests for the helper scripts
"""

import importlib.util
from pathlib import Path
from unittest.mock import patch

from crm_voice.core.config import settings

SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "scripts"


def load_script(name):
    module_spec = importlib.util.spec_from_file_location(f"scripts_{name}", SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


class TestRunServer:
    """Tests for scripts/run_server.py"""

    def test_uses_application_settings(self):
        run_server = load_script("run_server")

        with patch.object(run_server.uvicorn, "run") as mock_run:
            run_server.main()

        mock_run.assert_called_once_with(
            "crm_voice.main:app",
            host=settings.server_host,
            port=settings.server_port,
            reload=settings.debug,
            log_level=settings.log_level.lower()
        )
