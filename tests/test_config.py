"""Tests pour le module config."""

import json
import os
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from exeq.authorization import WhitelistAuthorizer
from exeq.commands import DEFAULT_QUEUE, ExecutionOptions
from exeq.config import (
    ConfigLoader,
    ExeqSettings,
    FileConfigLoader,
    load_settings,
)
from exeq.errors import AuthorizationError, FileConfigurationError
from exeq.logging import FileLogger


TOML_CONFIG = """
privileged = false
echo = true
allow_file_redirect = true
jobs = 4
timeout = 2.5
whitelist = ["ls", "df"]
queue = "exeq+web01"

[logging]
level = "DEBUG"
file = "/tmp/exeq.log"
"""


# --- Tests FileConfigLoader ---


class TestFileConfigLoader:
    """Tests pour FileConfigLoader."""

    def setup_method(self):
        """Initialise le chargeur."""
        self.loader = FileConfigLoader()

    def test_implemente_l_interface(self):
        """FileConfigLoader implémente ConfigLoader."""
        assert isinstance(self.loader, ConfigLoader)

    def test_charge_toml(self, tmp_path):
        """Un fichier TOML est chargé en dict."""
        path = tmp_path / "exeq.toml"
        path.write_text(TOML_CONFIG)
        config = self.loader.load(path)
        assert config["whitelist"] == ["ls", "df"]
        assert config["logging"]["level"] == "DEBUG"

    def test_charge_json(self, tmp_path):
        """Un fichier JSON est chargé en dict."""
        path = tmp_path / "exeq.json"
        path.write_text(json.dumps({"echo": True}))
        assert self.loader.load(str(path)) == {"echo": True}

    def test_fichier_absent(self, tmp_path):
        """Un fichier absent lève FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            self.loader.load(tmp_path / "absent.toml")

    def test_extension_non_supportee(self, tmp_path):
        """Une extension inconnue est refusée."""
        path = tmp_path / "exeq.yaml"
        path.write_text("echo: true")
        with pytest.raises(ValueError, match="Extension non supportée"):
            self.loader.load(path)

    def test_validation_par_schema(self, tmp_path):
        """Un schema Pydantic produit une instance du modèle."""

        class Schema(BaseModel):
            echo: bool

        path = tmp_path / "exeq.json"
        path.write_text(json.dumps({"echo": True}))
        assert self.loader.load(path, schema=Schema) == Schema(echo=True)

    def test_schema_invalide(self, tmp_path):
        """Un schema qui n'est pas un BaseModel est refusé."""
        path = tmp_path / "exeq.json"
        path.write_text("{}")
        with pytest.raises(TypeError):
            self.loader.load(path, schema=dict)


# --- Tests ExeqSettings ---


class TestExeqSettings:
    """Tests pour ExeqSettings."""

    def test_valeurs_par_defaut(self):
        """Les valeurs par défaut sont prudentes."""
        settings = ExeqSettings()
        assert settings.privileged is False
        assert settings.echo is False
        assert settings.allow_file_redirect is False
        assert settings.jobs == (os.cpu_count() or 1)
        assert settings.timeout is None
        assert settings.whitelist == []
        assert settings.queue == DEFAULT_QUEUE
        assert settings.logging.level == "INFO"
        assert settings.logging.file is None

    def test_execution_options(self):
        """Les options de routage reprennent echo et redirections."""
        settings = ExeqSettings(echo=True, allow_file_redirect=True)
        assert settings.execution_options() == ExecutionOptions(
            echo_to_console=True, allow_file_redirect=True
        )

    def test_authorizer(self):
        """Le prédicat reprend la liste blanche et le mode privilégié."""
        authorizer = ExeqSettings(whitelist=["ls"]).authorizer()
        assert isinstance(authorizer, WhitelistAuthorizer)
        authorizer("ls")
        with pytest.raises(AuthorizationError):
            authorizer("rm")
        ExeqSettings(privileged=True).authorizer()("rm")

    def test_cancellation(self):
        """Chaque appel crée un contexte armé avec le délai."""
        settings = ExeqSettings(timeout=30)
        first, second = settings.cancellation(), settings.cancellation()
        try:
            assert first is not second
            assert first.timeout == 30
            assert first.cancelled is False
        finally:
            first.close()
            second.close()

    def test_cancellation_sans_delai(self):
        """Sans timeout, le contexte n'a pas d'échéance."""
        assert ExeqSettings().cancellation().timeout is None

    @pytest.mark.parametrize("field,value", [
        ("jobs", 0),
        ("timeout", 0),
        ("timeout", -5),
        ("queue", ""),
    ])
    def test_valeurs_invalides(self, field, value):
        """Les valeurs hors bornes sont refusées."""
        with pytest.raises(ValueError):
            ExeqSettings(**{field: value})

    def test_champ_inconnu(self):
        """Un champ inconnu est refusé."""
        with pytest.raises(ValueError):
            ExeqSettings(whitelst=["ls"])

    def test_logging_config_pour_file_logger(self, tmp_path):
        """La configuration de log est compatible avec FileLogger."""
        settings = ExeqSettings(logging={"level": "WARNING"})
        logger = FileLogger(
            str(tmp_path / "exeq.log"), config=settings.logging_config()
        )
        logger.log_info("invisible")
        logger.log_warning("visible")

        content = (tmp_path / "exeq.log").read_text()
        assert "invisible" not in content
        assert "visible" in content

    def test_logging_config_inclut_le_fichier(self, tmp_path):
        """Le fichier de log configuré est transmis à FileLogger."""
        log_file = str(tmp_path / "exeq.log")
        settings = ExeqSettings(logging={"file": log_file})
        assert settings.logging_config()["logging"]["file"] == log_file

    def test_create_logger(self, tmp_path):
        """create_logger écrit dans le fichier de la section [logging]."""
        log_file = tmp_path / "logs" / "exeq-settings.log"
        settings = ExeqSettings(logging={"file": str(log_file)})
        logger = settings.create_logger()
        assert isinstance(logger, FileLogger)
        logger.log_info("depuis la configuration")

        assert "depuis la configuration" in log_file.read_text()


# --- Tests load_settings ---


class TestLoadSettings:
    """Tests pour load_settings."""

    def test_sans_fichier(self):
        """Sans chemin, les valeurs par défaut sont retournées."""
        assert load_settings() == ExeqSettings()

    def test_fichier_toml(self, tmp_path):
        """Un fichier TOML complet est chargé et validé."""
        path = tmp_path / "exeq.toml"
        path.write_text(TOML_CONFIG)

        settings = load_settings(path)

        assert settings.echo is True
        assert settings.allow_file_redirect is True
        assert settings.jobs == 4
        assert settings.timeout == 2.5
        assert settings.whitelist == ["ls", "df"]
        assert settings.queue == "exeq+web01"
        assert settings.logging.level == "DEBUG"
        assert settings.logging.file == "/tmp/exeq.log"

    def test_fichier_absent(self, tmp_path):
        """Un fichier absent lève FileConfigurationError."""
        with pytest.raises(FileConfigurationError):
            load_settings(tmp_path / "absent.toml")

    def test_toml_invalide(self, tmp_path):
        """Un TOML illisible lève FileConfigurationError."""
        path = tmp_path / "exeq.toml"
        path.write_text("whitelist = [")
        with pytest.raises(FileConfigurationError):
            load_settings(path)

    def test_contenu_invalide(self, tmp_path):
        """Un contenu hors schéma lève FileConfigurationError."""
        path = tmp_path / "exeq.json"
        path.write_text(json.dumps({"jobs": "beaucoup"}))
        with pytest.raises(FileConfigurationError) as exc_info:
            load_settings(path)
        assert "jobs" in str(exc_info.value)

    def test_chargeur_injecte(self):
        """Le chargeur peut être substitué."""
        loader = MagicMock(spec=ConfigLoader)
        loader.load.return_value = ExeqSettings(echo=True)

        settings = load_settings("exeq.toml", loader=loader)

        loader.load.assert_called_once_with("exeq.toml", schema=ExeqSettings)
        assert settings.echo is True
