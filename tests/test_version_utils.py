"""版本工具函数测试。"""

import pytest

from nvmx.core import version_utils


class TestNormalizeVersion:
    """版本规范化测试。"""

    @pytest.mark.parametrize("raw", ["14.17.0", "v14.17.0", "", "lts", "vv1.2.3", "1"])
    def test_is_idempotent_and_prefixed(self, raw):
        once = version_utils.normalize_version(raw)
        assert once.startswith("v")
        assert version_utils.normalize_version(once) == once

    def test_adds_prefix(self):
        assert version_utils.normalize_version("14.17.0") == "v14.17.0"

    def test_strip_prefix(self):
        assert version_utils.strip_version_prefix("v16.13.0") == "16.13.0"
        assert version_utils.strip_version_prefix("16.13.0") == "16.13.0"


class TestIsValidVersion:
    """版本号校验测试。"""

    @pytest.mark.parametrize("version", ["v14.17.0", "14.17.0", "v0.0.1"])
    def test_accepts_three_components(self, version):
        assert version_utils.is_valid_version(version)

    @pytest.mark.parametrize("version", ["", "v14", "v14.17", "vlts", "v1.2.3-rc.1", "node-v1.2.3"])
    def test_rejects_others(self, version):
        assert not version_utils.is_valid_version(version)


class TestSortVersionsDesc:
    """版本排序测试。"""

    def test_numeric_not_lexical(self):
        versions = ["v9.0.0", "v10.0.0", "v9.10.0", "v9.2.0", "v10.0.10", "v10.0.9"]
        assert version_utils.sort_versions_desc(versions) == [
            "v10.0.10", "v10.0.9", "v10.0.0", "v9.10.0", "v9.2.0", "v9.0.0",
        ]
