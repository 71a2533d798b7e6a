"""Tests for the chunkwright configuration system."""

import json

import pytest
import yaml
from pydantic import ValidationError as PydanticValidationError

from chunkwright.core.config import (
    ChunkingConfig,
    ChunkwrightConfig,
    EmbeddingConfig,
    ParallelConfig,
    SimilarityStoreConfig,
    get_config,
    reset_config,
    set_config,
)
from chunkwright.core.config.settings_sources import find_config_files
from chunkwright.core.exceptions import ConfigurationError, ErrorKind
from chunkwright.core.types import ChunkingStrategy, SimilarityMetric


class TestChunkingConfig:
    """Test segmentation configuration merging and invariants."""

    def test_defaults(self):
        """Test default configuration values."""
        config = ChunkingConfig()
        assert config.chunk_size == 512
        assert config.overlap == 50
        assert config.strategy is ChunkingStrategy.FIXED
        assert config.preserve_paragraphs is True
        assert config.min_chunk_size == 100
        assert config.max_chunk_size == 1024

    def test_merge_none_gives_defaults(self):
        assert ChunkingConfig.merge(None) == ChunkingConfig()

    def test_small_chunk_size_clamps_unsupplied_defaults(self):
        """Unsupplied overlap and minimum shrink to half the chunk size."""
        config = ChunkingConfig.merge({"chunkSize": 50})
        assert config.overlap == 25
        assert config.min_chunk_size == 25
        assert config.max_chunk_size == 1024
        assert config.model_fields_set == {"chunk_size"}

    @pytest.mark.parametrize("size, overlap, minimum", [
        (150, 50, 100),
        (100, 50, 100),
        (80, 50, 40),
        (51, 50, 25),
    ])
    def test_valid_defaults_are_kept(self, size, overlap, minimum):
        """A default is lowered only when it would break an invariant."""
        config = ChunkingConfig.merge({"chunkSize": size})
        assert (config.overlap, config.min_chunk_size) == (overlap, minimum)

    def test_large_chunk_size_raises_unsupplied_maximum(self):
        config = ChunkingConfig.merge({"chunkSize": 2000})
        assert config.max_chunk_size == 2000
        assert config.overlap == 50
        assert config.min_chunk_size == 100

    def test_snake_case_keys_and_overrides(self):
        config = ChunkingConfig.merge({"chunk_size": 300}, overlap=10)
        assert (config.chunk_size, config.overlap) == (300, 10)

    @pytest.mark.parametrize("partial", [
        {"chunkSize": 100, "overlap": 100},
        {"chunkSize": 100, "minChunkSize": 150},
        {"chunkSize": 2000, "maxChunkSize": 1000},
        {"chunkSize": 0},
        {"overlap": -1},
    ])
    def test_invariant_violations(self, partial):
        """Explicit values that break the size invariants are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            ChunkingConfig.merge(partial)
        assert exc_info.value.kind is ErrorKind.CONFIGURATION

    def test_strategy_names_any_case(self):
        assert ChunkingConfig.merge(strategy="SEMANTIC").strategy is ChunkingStrategy.SEMANTIC

    def test_unknown_strategy(self):
        with pytest.raises(ConfigurationError, match="strategy"):
            ChunkingConfig.merge({"strategy": "bogus"})

    def test_non_mapping_partial(self):
        with pytest.raises(ConfigurationError):
            ChunkingConfig.merge(["chunkSize", 50])

    def test_updated_keeps_supplied_fields(self):
        """Updating re-checks unsupplied defaults but keeps explicit values."""
        config = ChunkingConfig.merge({"overlap": 10})
        updated = config.updated(chunkSize=80)

        assert updated.overlap == 10
        assert updated.min_chunk_size == 40
        assert config.chunk_size == 512

    def test_merge_existing_record(self):
        base = ChunkingConfig.merge({"chunkSize": 200})
        merged = ChunkingConfig.merge(base, strategy="sliding")
        assert merged.chunk_size == 200
        assert merged.strategy is ChunkingStrategy.SLIDING

    def test_frozen(self):
        config = ChunkingConfig()
        with pytest.raises(PydanticValidationError):
            config.chunk_size = 10

    def test_to_dict_uses_camel_case(self):
        data = ChunkingConfig.merge({"chunkSize": 256}).to_dict()
        assert data["chunkSize"] == 256
        assert data["strategy"] == "fixed"
        assert "minChunkSize" in data

    def test_step(self):
        assert ChunkingConfig.merge({"chunkSize": 40, "overlap": 10}).step == 30


class TestStoreAndParallelConfig:
    """Test the similarity store and parallel configuration records."""

    def test_store_defaults(self):
        config = SimilarityStoreConfig()
        assert config.similarity_metric is SimilarityMetric.COSINE
        assert config.index_type == "brute-force"
        assert config.max_results == 10
        assert config.threshold == 0.0
        assert config.normalize_vectors is False

    def test_metric_case_insensitive(self):
        config = SimilarityStoreConfig.merge({"similarityMetric": "EUCLIDEAN"})
        assert config.similarity_metric is SimilarityMetric.EUCLIDEAN

    def test_only_brute_force_index(self):
        with pytest.raises(ConfigurationError):
            SimilarityStoreConfig.merge({"indexType": "hnsw"})

    def test_max_results_positive(self):
        with pytest.raises(ConfigurationError):
            SimilarityStoreConfig.merge({"maxResults": 0})

    def test_parallel_executor(self):
        assert ParallelConfig(executor="thread").executor == "thread"
        with pytest.raises(PydanticValidationError):
            ParallelConfig(executor="fiber")
        with pytest.raises(PydanticValidationError):
            ParallelConfig(workers=0)


class TestEmbeddingConfig:
    """Test embedding provider configuration."""

    def test_defaults(self):
        config = EmbeddingConfig()
        assert config.provider == "fingerprint"
        assert config.get_default_model() == "char-histogram"
        assert config.is_provider_configured()

    def test_openai_requires_key(self):
        config = EmbeddingConfig(provider="openai")
        assert not config.is_provider_configured()
        assert config.get_missing_config() == ["api_key (CHUNKWRIGHT_EMBEDDING__API_KEY)"]
        assert config.get_default_model() == "text-embedding-3-small"

    def test_base_url_normalized(self):
        config = EmbeddingConfig(base_url="https://example.test/v1/")
        assert config.base_url == "https://example.test/v1"

    def test_base_url_scheme(self):
        with pytest.raises(PydanticValidationError):
            EmbeddingConfig(base_url="ftp://example.test")

    def test_repr_hides_api_key(self):
        config = EmbeddingConfig(provider="openai", api_key="sk-secret")
        assert "sk-secret" not in repr(config)


class TestChunkwrightConfig:
    """Test hierarchical loading of the unified configuration."""

    @pytest.fixture
    def file_data(self):
        return {
            "chunking": {"chunkSize": 300, "strategy": "semantic"},
            "store": {"similarityMetric": "dot"},
        }

    def test_defaults(self):
        config = ChunkwrightConfig()
        assert config.chunking == ChunkingConfig()
        assert config.embedding.provider == "fingerprint"
        assert config.debug is False

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("CHUNKWRIGHT_CHUNKING__CHUNK_SIZE", "256")
        monkeypatch.setenv("CHUNKWRIGHT_STORE__SIMILARITY_METRIC", "manhattan")
        monkeypatch.setenv("CHUNKWRIGHT_DEBUG", "true")

        config = ChunkwrightConfig()

        assert config.chunking.chunk_size == 256
        assert config.store.similarity_metric is SimilarityMetric.MANHATTAN
        assert config.debug is True

    def test_load_yaml(self, temp_dir, file_data):
        path = temp_dir / "chunkwright.yaml"
        path.write_text(yaml.safe_dump(file_data))

        config = ChunkwrightConfig.load_hierarchical(config_file=path)

        assert config.chunking.chunk_size == 300
        assert config.chunking.strategy is ChunkingStrategy.SEMANTIC
        assert config.store.similarity_metric is SimilarityMetric.DOT

    def test_load_toml(self, temp_dir):
        path = temp_dir / "chunkwright.toml"
        path.write_text('[chunking]\nchunkSize = 128\n\n[parallel]\nexecutor = "thread"\n')

        config = ChunkwrightConfig.load_hierarchical(config_file=path)

        assert config.chunking.chunk_size == 128
        assert config.parallel.executor == "thread"

    def test_load_json(self, temp_dir, file_data):
        path = temp_dir / "settings.json"
        path.write_text(json.dumps(file_data))

        config = ChunkwrightConfig.load_hierarchical(config_file=path)
        assert config.chunking.chunk_size == 300

    def test_overrides_beat_file(self, temp_dir, file_data):
        """Runtime overrides merge over the file section by section."""
        path = temp_dir / "chunkwright.json"
        path.write_text(json.dumps(file_data))

        config = ChunkwrightConfig.load_hierarchical(config_file=path, chunking={"chunkSize": 128})

        assert config.chunking.chunk_size == 128
        assert config.chunking.strategy is ChunkingStrategy.SEMANTIC

    def test_file_beats_environment(self, temp_dir, monkeypatch):
        monkeypatch.setenv("CHUNKWRIGHT_CHUNKING__CHUNK_SIZE", "64")
        path = temp_dir / "chunkwright.json"
        path.write_text(json.dumps({"chunking": {"chunk_size": 300}}))

        config = ChunkwrightConfig.load_hierarchical(config_file=path)
        assert config.chunking.chunk_size == 300

    def test_missing_explicit_file(self, temp_dir):
        with pytest.raises(ConfigurationError, match="not found"):
            ChunkwrightConfig.load_hierarchical(config_file=temp_dir / "absent.yaml")

    def test_unknown_format(self, temp_dir):
        path = temp_dir / "chunkwright.ini"
        path.write_text("[chunking]\n")
        with pytest.raises(ConfigurationError, match="Unknown config file format"):
            ChunkwrightConfig.load_hierarchical(config_file=path)

    def test_malformed_explicit_file(self, temp_dir):
        path = temp_dir / "chunkwright.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Failed to load"):
            ChunkwrightConfig.load_hierarchical(config_file=path)

    def test_invalid_values_in_file(self, temp_dir):
        path = temp_dir / "chunkwright.json"
        path.write_text(json.dumps({"chunking": {"chunkSize": 10, "overlap": 20}}))
        with pytest.raises(ConfigurationError):
            ChunkwrightConfig.load_hierarchical(config_file=path)

    def test_discovery_in_project_dir(self, temp_dir):
        """Discovered files merge in order, later names overriding earlier ones."""
        (temp_dir / "chunkwright.yaml").write_text(yaml.safe_dump({"chunking": {"chunkSize": 200}}))
        (temp_dir / ".chunkwright.json").write_text(json.dumps({"chunking": {"strategy": "adaptive"}}))

        assert find_config_files([temp_dir]) == [
            temp_dir / "chunkwright.yaml",
            temp_dir / ".chunkwright.json",
        ]

        config = ChunkwrightConfig.load_hierarchical(project_dir=temp_dir)
        assert config.chunking.chunk_size == 200
        assert config.chunking.strategy is ChunkingStrategy.ADAPTIVE

    def test_discovery_skips_broken_files(self, temp_dir):
        (temp_dir / "chunkwright.json").write_text("[broken")
        config = ChunkwrightConfig.load_hierarchical(project_dir=temp_dir)
        assert config.chunking == ChunkingConfig()

    def test_missing_config_report(self):
        config = ChunkwrightConfig(embedding={"provider": "openai"})
        assert not config.is_fully_configured()
        assert config.get_missing_config() == ["embedding.api_key (CHUNKWRIGHT_EMBEDDING__API_KEY)"]

    def test_global_config(self):
        config = ChunkwrightConfig(debug=True)
        set_config(config)
        assert get_config() is config

        reset_config()
        set_config(ChunkwrightConfig())
        assert get_config().debug is False
