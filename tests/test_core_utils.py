"""
Tests for core.utils module
"""

import pytest
from core.utils import ParamParser, InlineConfig
from core.exceptions import ValidationError, ConfigurationError


class TestParamParser:
    """Tests for ParamParser class"""

    def test_parse_empty_string(self):
        """Test parsing empty string"""
        assert ParamParser.parse("") == {}

    def test_parse_multiple_params(self):
        """Test parsing multiple parameters"""
        result = ParamParser.parse("minify=true;inlineAll=false;outputDir=build")
        assert result == {
            "minify": "true",
            "inlineAll": "false",
            "outputDir": "build"
        }

    def test_parse_with_spaces(self):
        """Test parsing with spaces"""
        result = ParamParser.parse(" key1 = value1 ; key2 = value2 ")
        assert result == {"key1": "value1", "key2": "value2"}

    def test_parse_value_with_equals(self):
        """Test values containing '=' are kept whole"""
        result = ParamParser.parse("scriptTagPattern=<script src=\"([^\"]+)\"></script>")
        assert result["scriptTagPattern"] == "<script src=\"([^\"]+)\"></script>"

    def test_get_required_missing(self):
        """Test getting required key that's missing"""
        with pytest.raises(ValidationError):
            ParamParser.get("key1=value1", "key2", required=True)

    def test_get_bool_true(self):
        """Test parsing boolean true values"""
        for value in ("true", "1", "yes", "on", "TRUE"):
            assert ParamParser.get_bool(f"minify={value}", "minify") is True

    def test_get_bool_false(self):
        """Test parsing boolean false values"""
        for value in ("false", "0", "no", "off"):
            assert ParamParser.get_bool(f"minify={value}", "minify") is False

    def test_get_bool_default(self):
        """Test boolean default value"""
        assert ParamParser.get_bool("", "minify", default=True) is True

    def test_get_bool_invalid(self):
        """Test non-boolean value is rejected"""
        with pytest.raises(ValidationError):
            ParamParser.get_bool("minify=maybe", "minify")

    def test_get_list_with_spaces(self):
        """Test parsing list with spaces"""
        result = ParamParser.get_list("sourceDirs= src , public ", "sourceDirs")
        assert result == ["src", "public"]


class TestInlineConfig:
    """Tests for InlineConfig class"""

    def test_get_config_defaults(self):
        """Test that defaults are returned when config.yaml is absent"""
        config = InlineConfig.get_config()

        assert config['outputDir'] == 'dist'
        assert config['minify'] is False
        assert config['inlineAll'] is False
        assert config['sourceDirs'] == ['src', 'public']
        assert config['inlineMarker'] == 'inline'

    def test_defaults_are_not_shared(self):
        """Test mutating a returned config leaves the defaults intact"""
        config = InlineConfig.get_config()
        config['sourceDirs'].append('static')
        assert InlineConfig.DEFAULTS['sourceDirs'] == ['src', 'public']

    def test_section_overrides_defaults(self, temp_dir):
        """Test the jsInline section of a discovered config.yaml"""
        (temp_dir / "config.yaml").write_text(
            "jsInline:\n"
            "  minify: true\n"
            "  sourceDirs: [assets]\n"
            "  outputDir: build\n"
        )
        config = InlineConfig.get_config()
        assert config['minify'] is True
        assert config['sourceDirs'] == ['assets']
        assert config['outputDir'] == 'build'
        assert config['inlineAll'] is False

    def test_invalid_discovered_config_falls_back(self, temp_dir):
        """Test a broken auto-discovered file yields defaults"""
        (temp_dir / "config.yaml").write_text("jsInline: [unclosed\n")
        config = InlineConfig.get_config()
        assert config == {**InlineConfig.DEFAULTS, 'sourceDirs': ['src', 'public']}

    def test_invalid_explicit_config_raises(self, temp_dir):
        """Test a broken explicit file is an error"""
        path = temp_dir / "custom.yaml"
        path.write_text("jsInline: [unclosed\n")
        with pytest.raises(ConfigurationError):
            InlineConfig.get_config(path)

    def test_wrong_type_rejected(self, temp_dir):
        """Test option values are type checked"""
        (temp_dir / "config.yaml").write_text("jsInline:\n  minify: sometimes\n")
        with pytest.raises(ConfigurationError):
            InlineConfig.get_config()

    def test_from_params(self):
        """Test parameter string overrides"""
        overrides = InlineConfig.from_params("minify=yes;sourceDirs=src,static;inlineMarker=data-inline")
        assert overrides == {
            'minify': True,
            'sourceDirs': ['src', 'static'],
            'inlineMarker': 'data-inline',
        }

    def test_from_params_only_present_keys(self):
        """Test absent keys are not returned"""
        assert InlineConfig.from_params("") == {}

    def test_explicit_config_not_cached(self, temp_dir):
        """Test an explicit file does not replace the discovered config"""
        (temp_dir / "config.yaml").write_text("jsInline:\n  inlineMarker: data-inline\n")
        other = temp_dir / "other.yaml"
        other.write_text("jsInline:\n  inlineAll: true\n")

        assert InlineConfig.get_config(other)['inlineAll'] is True
        config = InlineConfig.get_config()
        assert config['inlineAll'] is False
        assert config['inlineMarker'] == 'data-inline'


class TestResolveSettings:
    """Tests for InlineConfig.resolve_settings"""

    def test_defaults(self):
        """Test defaults map to inliner keyword arguments"""
        kwargs = InlineConfig.resolve_settings()
        assert kwargs['output_dir'] == 'dist'
        assert kwargs['minify'] is False
        assert kwargs['source_dirs'] == ['src', 'public']
        assert kwargs['inline_marker'] == 'inline'
        assert 'transform_content' not in kwargs

    def test_layer_order(self, temp_dir):
        """Test config < params < options < output_dir"""
        (temp_dir / "config.yaml").write_text(
            "jsInline:\n"
            "  outputDir: build\n"
            "  minify: true\n"
            "  inlineMarker: data-inline\n"
        )
        kwargs = InlineConfig.resolve_settings(
            params="minify=false;inlineAll=true",
            options={'inlineAll': False},
        )
        assert kwargs['output_dir'] == 'build'
        assert kwargs['inline_marker'] == 'data-inline'
        assert kwargs['minify'] is False
        assert kwargs['inline_all'] is False

        assert InlineConfig.resolve_settings('out')['output_dir'] == 'out'

    def test_unknown_option(self):
        """Test unknown keyword options are rejected"""
        with pytest.raises(ValidationError):
            InlineConfig.resolve_settings(options={'minifier': 'terser'})
