import pytest

from slidedeck_ml.exceptions import AssetCopyError
from slidedeck_ml.media_assets import (
    AssetCopier,
    is_absolute_url,
    media_src,
    render_video,
    youtube_video_id,
)


def test_copy_asset_is_idempotent(tmp_path):
    source = tmp_path / "assets"
    (source / "img").mkdir(parents=True)
    (source / "img" / "a.png").write_bytes(b"first")
    copier = AssetCopier(source, tmp_path / "out" / "assets")

    url = copier.copy_asset("img/a.png")
    (source / "img" / "a.png").write_bytes(b"second")
    again = copier("img/a.png")

    assert url == again == "./assets/img/a.png"
    assert (tmp_path / "out" / "assets" / "img" / "a.png").read_bytes() == b"first"
    assert copier.copied == {"img/a.png": "./assets/img/a.png"}


def test_missing_asset_raises(tmp_path):
    copier = AssetCopier(tmp_path, tmp_path / "out")

    with pytest.raises(AssetCopyError) as excinfo:
        copier.copy_asset("ghost.png")

    assert isinstance(excinfo.value.original_error, OSError)
    assert excinfo.value.error_type == "asset_copy"


def test_absolute_urls_are_never_copied():
    def fail(_path):
        raise AssertionError("should not copy")

    assert is_absolute_url("https://example.com/x.png")
    assert not is_absolute_url("img/x.png")
    assert media_src("http://example.com/x.png", fail) == "http://example.com/x.png"
    assert media_src("img/x.png", None) == "img/x.png"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.youtube.com/watch?v=abc&t=10", "abc"),
        ("https://youtu.be/short1", "short1"),
        ("https://youtube.com/channel/xyz", None),
        ("https://vimeo.com/123", None),
    ],
)
def test_youtube_video_id(url, expected):
    assert youtube_video_id(url) == expected


def test_render_video_keeps_fragment_attributes():
    html = render_video("./assets/clip.mp4", "content-3 fragment", ' data-fragment-index="1"')

    assert html == (
        '<video src="./assets/clip.mp4" class="content-3 fragment" data-fragment-index="1" controls></video>'
    )
