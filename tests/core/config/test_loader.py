# tests/core/config/test_loader.py
"""
Testes do carregador de configuração (load_config) e helpers de leitura.

Os testes asseguram que:
- o arquivo defaults é obrigatório e o local é opcional
- formatos e raízes inválidos são rejeitados com exceções tipadas
- overrides locais são aplicados via deep-merge
- `get_path`, `step_config` e `resolve_config_path` leem a config sem
  levantar erro para níveis ausentes

Limites explícitos:
    - Não valida hashing de configuração
    - Não valida semântica de domínio (docs.root existir etc.)
"""

import json
from pathlib import Path

import pytest

try:
    from atlas_docaudit.core.config.loader import get_path, load_config, resolve_config_path, step_config
    from atlas_docaudit.core.config.errors import (
        ConfigError,
        DefaultsNotFoundError,
        InvalidConfigRootTypeError,
        UnsupportedConfigFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_config = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """Falha cedo, com mensagem explícita, se o loader não puder ser importado."""
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing config loader. Implement:
- src/atlas_docaudit/core/config/loader.py (load_config)
- src/atlas_docaudit/core/config/errors.py
Import error: {_IMPORT_ERR}
""")


def test_missing_defaults_raises(tmp_path: Path):
    _require_imports()
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(tmp_path / "nope.yaml"), local_path=None)


def test_missing_local_is_ok(tmp_path: Path, project_like_config_defaults_yaml):
    """Local ausente é ignorado: o resultado é exatamente o defaults."""
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(project_like_config_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))
    assert out["docs"]["root"] == "site"
    assert out["steps"]["audit.translations"]["enabled"] is True


def test_load_defaults_and_local(tmp_path: Path, project_like_config_defaults_yaml, project_like_config_local_yaml):
    """
    Verifica o merge defaults + local.

    Listas são substituídas por inteiro; chaves não sobrescritas permanecem;
    ids de Step com ponto (`audit.translations`) são chaves comuns.
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(project_like_config_defaults_yaml, encoding="utf-8")
    local.write_text(project_like_config_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))
    assert out["docs"]["exclude"] == ["drafts/**"]
    assert out["docs"]["include"] == ["**/*.md"]
    assert out["steps"]["audit.translations"]["enabled"] is False
    assert out["steps"]["audit.diff_markers"]["threshold"] == 0.8
    assert out["engine"]["fail_fast"] is False


def test_json_config_is_supported(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.json"
    defaults.write_text(json.dumps({"docs": {"root": "."}}), encoding="utf-8")
    assert load_config(defaults_path=str(defaults)) == {"docs": {"root": "."}}


def test_empty_yaml_is_empty_config(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yml"
    defaults.write_text("", encoding="utf-8")
    assert load_config(defaults_path=str(defaults)) == {}


def test_invalid_root_type_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- just\n- a\n- list\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults), local_path=None)


def test_unsupported_extension_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("docs = { root = '.' }\n", encoding="utf-8")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults), local_path=None)


def test_config_errors_share_base_class():
    _require_imports()
    for exc in (DefaultsNotFoundError, InvalidConfigRootTypeError, UnsupportedConfigFormatError):
        assert issubclass(exc, ConfigError)


def test_get_path_reads_nested_keys_with_default():
    _require_imports()
    cfg = {"docs": {"root": "site", "include": ["**/*.md"]}}
    assert get_path(cfg, "docs.root") == "site"
    assert get_path(cfg, "docs.exclude", []) == []
    assert get_path(cfg, "contract.path") is None
    assert get_path({"docs": "flat"}, "docs.root", "x") == "x"


def test_step_config_handles_dotted_step_ids():
    _require_imports()
    cfg = {"steps": {"audit.links": {"enabled": False}, "audit.encoding": None}}
    assert step_config(cfg, "audit.links") == {"enabled": False}
    assert step_config(cfg, "audit.encoding") == {}
    assert step_config({}, "audit.links") == {}


def test_resolve_config_path_anchors_relative_paths(tmp_path: Path):
    _require_imports()
    assert resolve_config_path("site", base_dir=tmp_path) == (tmp_path / "site").absolute()
    absolute = (tmp_path / "abs").absolute()
    assert resolve_config_path(str(absolute), base_dir="/elsewhere") == absolute
