# =============================================================================
# tests/unit/test_media_store.py
# Unit Tests for MediaStore
# =============================================================================

import asyncio
from unittest.mock import MagicMock

import pytest

from publi_core.errors import MediaStoreError
from publi_core.offline.media_store import (
    BRAND_FAVICON_KEY,
    BRAND_LOGO_KEY,
    MediaStore,
    encode_data_url,
)

PNG = "data:image/png;base64,iVBORw0KGgo="


@pytest.fixture
def media(tmp_path):
    return MediaStore(tmp_path / "media.db")


class TestMediaStore:
    """Test async image storage"""

    def test_missing_key_returns_none(self, media):
        assert asyncio.run(media.get("p-unknown")) is None

    def test_empty_key_returns_none(self, media):
        assert asyncio.run(media.get("")) is None

    def test_save_then_get(self, media):
        async def scenario():
            await media.save("p1", PNG)
            return await media.get("p1")

        assert asyncio.run(scenario()) == PNG

    def test_save_overwrites(self, media):
        async def scenario():
            await media.save("p1", PNG)
            await media.save("p1", "data:image/png;base64,AAAA")
            return await media.get_all()

        assert asyncio.run(scenario()) == {"p1": "data:image/png;base64,AAAA"}

    def test_save_empty_key_raises(self, media):
        with pytest.raises(MediaStoreError):
            asyncio.run(media.save("", PNG))

    def test_concurrent_init_creates_store_once(self, media):
        """Racing first uses share a single schema creation"""
        create_schema = MagicMock(wraps=media._create_schema)
        media._create_schema = create_schema

        async def scenario():
            await asyncio.gather(*(media.get(f"k{i}") for i in range(10)))
            await media.init()

        asyncio.run(scenario())

        assert create_schema.call_count == 1

    def test_delete_and_clear(self, media):
        async def scenario():
            await media.save("a", PNG)
            await media.save("b", PNG)
            await media.delete("a")
            after_delete = await media.get_all()
            await media.clear()
            return after_delete, await media.get_all()

        after_delete, after_clear = asyncio.run(scenario())

        assert after_delete == {"b": PNG}
        assert after_clear == {}

    def test_reset_branding_keeps_other_images(self, media):
        async def scenario():
            await media.save(BRAND_LOGO_KEY, PNG)
            await media.save(BRAND_FAVICON_KEY, PNG)
            await media.save("p1", PNG)
            await media.reset_branding()
            return await media.get_all()

        assert asyncio.run(scenario()) == {"p1": PNG}

    def test_data_persists_across_instances(self, tmp_path):
        path = tmp_path / "media.db"
        asyncio.run(MediaStore(path).save("i1", PNG))

        assert asyncio.run(MediaStore(path).get("i1")) == PNG

    def test_unopenable_store_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        media = MediaStore(blocker / "media.db")

        with pytest.raises(MediaStoreError):
            asyncio.run(media.get("k"))


class TestEncodeDataUrl:

    def test_encode(self):
        assert encode_data_url(b"abc", "image/png") == "data:image/png;base64,YWJj"
