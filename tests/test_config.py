"""Tests for configuration loading and overrides."""

import pytest

from linkview.config import (
    DEFAULT_FILES,
    LinkViewConfig,
    Margin,
    apply_overrides,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv('LINKVIEW_DATA_DIR', raising=False)
    monkeypatch.delenv('LINKVIEW_LOG_LEVEL', raising=False)


class TestDefaults:

    def test_layout(self):
        config = LinkViewConfig()
        assert config.matrix_size == (800, 800)
        assert config.matrix_margin == Margin(50, 20, 65, 50)
        assert config.significance_threshold == 0.01
        assert config.files == DEFAULT_FILES

    def test_path_for(self, tmp_path):
        config = LinkViewConfig(data_dir=tmp_path)
        assert config.path_for('granger') == tmp_path / 'grangerTest_new.csv'

    def test_path_for_needs_data_dir(self):
        with pytest.raises(ValueError):
            LinkViewConfig().path_for('target')


class TestOverrides:

    def test_yaml_file(self, tmp_path):
        path = tmp_path / 'linkview.yaml'
        path.write_text(
            "significance_threshold: 0.005\n"
            "matrix_size: [900, 700]\n"
            "matrix_margin: {top: 10, right: 10, bottom: 10, left: 10}\n"
            "files:\n"
            "  granger: granger_v2.csv\n"
        )
        config = load_config(path)
        assert config.significance_threshold == 0.005
        assert config.matrix_size == (900, 700)
        assert config.matrix_margin == Margin(10, 10, 10, 10)
        assert config.files['granger'] == 'granger_v2.csv'
        assert config.files['target'] == DEFAULT_FILES['target']

    def test_unknown_keys_ignored(self):
        config = apply_overrides(LinkViewConfig(), {'colour': 'red', 'tooltip_offset': 8})
        assert config.tooltip_offset == 8
        assert not hasattr(config, 'colour')

    def test_only_layout_sizes_in_use(self):
        """Tooltips clamp to the frame they hover; there is no window size setting."""
        config = apply_overrides(LinkViewConfig(), {'viewport_size': [1, 1]})
        assert not hasattr(config, 'viewport_size')
        assert config.matrix_size == (800, 800)

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_precedence(self, tmp_path, monkeypatch):
        path = tmp_path / 'linkview.yaml'
        path.write_text(f"data_dir: {tmp_path / 'from_yaml'}\nlog_level: DEBUG\n")
        monkeypatch.setenv('LINKVIEW_DATA_DIR', str(tmp_path / 'from_env'))
        monkeypatch.setenv('LINKVIEW_LOG_LEVEL', 'warning')

        config = load_config(path)
        assert config.data_dir == tmp_path / 'from_env'
        assert config.log_level == 'WARNING'

        config = load_config(path, data_dir=tmp_path / 'explicit')
        assert config.data_dir == tmp_path / 'explicit'

    def test_no_file(self):
        config = load_config()
        assert config.data_dir is None
        assert isinstance(config, LinkViewConfig)
