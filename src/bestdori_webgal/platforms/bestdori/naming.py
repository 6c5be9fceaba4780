"""Naming rules for Bestdori assets.

Every rule maps an AssetReference (or a Live2D costume name) to a
ResourceRef: the remote URL on the content host and the destination path
inside the WebGAL game directory. The rules are pure; the resolver uses
them to build the download manifest and the transpiler uses them to write
the same paths into scene files.
"""

from ...config import AssetUrls
from ...core.resources import AssetKind, ResourceRef
from ...core.script import AssetReference, ReferenceType
from ...errors import UnresolvableAsset
from ...paths import (
    flatten_identifier,
    lower_first_alphabetic,
    sanitize_filename,
    url_to_filename,
    validate_url,
)

IMAGE_EXTENSION = ".png"
SOUND_EXTENSION = ".mp3"

LIVE2D_MANIFEST = "buildData.asset"
LIVE2D_CONFIG = "model.json"


class AssetNaming:
    """Computes remote URLs and local paths from the configured URL tables.

    Example:
        >>> naming = AssetNaming(config.urls)
        >>> ref = naming.background(AssetReference(file="bg00051", bundle="bg/scenario15"))
        >>> ref.path
        'background/bg_scenario15-bg00051.png'
    """

    def __init__(self, urls: AssetUrls):
        self.urls = urls

    # ---------------- single-file assets ----------------

    def background(self, reference: AssetReference) -> ResourceRef:
        """Name a background or card still image.

        Raises:
            UnresolvableAsset: If the reference is neither a custom URL nor a
                               bundled file
        """
        if reference.url is not None:
            return self._uploaded(reference, AssetKind.BACKGROUND, IMAGE_EXTENSION)
        if reference.kind is ReferenceType.BANDORI and reference.file and reference.bundle:
            return self._bundled(reference, AssetKind.BACKGROUND, IMAGE_EXTENSION)
        raise UnresolvableAsset(AssetKind.BACKGROUND.value, reference.describe())

    def bgm(self, reference: AssetReference) -> ResourceRef:
        """Name a music track.

        Scenario music without an explicit bundle lives in its own bundle
        whose name is the file name with the first letter lower-cased.
        """
        if reference.url is not None:
            return self._uploaded(reference, AssetKind.BGM, SOUND_EXTENSION)
        if reference.kind is ReferenceType.BANDORI and reference.file:
            if reference.bundle:
                return self._bundled(reference, AssetKind.BGM, SOUND_EXTENSION)
            file = sanitize_filename(reference.file)
            bundle = f"{self.urls.bgm_bundle}{lower_first_alphabetic(reference.file)}"
            return ResourceRef(
                url=f"{self.urls.bundle_root}{bundle}_rip/{reference.file}{SOUND_EXTENSION}",
                path=f"{AssetKind.BGM.directory}/{file}{SOUND_EXTENSION}",
                kind=AssetKind.BGM,
            )
        raise UnresolvableAsset(AssetKind.BGM.value, reference.describe())

    def sound_effect(self, reference: AssetReference) -> ResourceRef:
        """Name a sound effect or voice line."""
        if reference.url is not None:
            return self._uploaded(reference, AssetKind.VOCAL, SOUND_EXTENSION)
        if not reference.file:
            raise UnresolvableAsset(AssetKind.VOCAL.value, reference.describe(), "no file name")
        if reference.kind is ReferenceType.COMMON:
            return ResourceRef(
                url=f"{self.urls.se_common}{reference.file}{SOUND_EXTENSION}",
                path=f"{AssetKind.VOCAL.directory}/{sanitize_filename(reference.file)}{SOUND_EXTENSION}",
                kind=AssetKind.VOCAL,
            )
        if reference.kind is ReferenceType.BANDORI and reference.bundle:
            return self._bundled(reference, AssetKind.VOCAL, SOUND_EXTENSION)
        raise UnresolvableAsset(AssetKind.VOCAL.value, reference.describe())

    def _uploaded(self, reference: AssetReference, kind: AssetKind, extension: str) -> ResourceRef:
        url = reference.url or ""
        try:
            validate_url(url)
        except ValueError as e:
            raise UnresolvableAsset(kind.value, reference.describe(), str(e)) from e
        return ResourceRef(url=url, path=f"{kind.directory}/{url_to_filename(url, extension)}", kind=kind)

    def _bundled(self, reference: AssetReference, kind: AssetKind, extension: str) -> ResourceRef:
        bundle = reference.bundle or ""
        file = reference.file or ""
        return ResourceRef(
            url=f"{self.urls.bundle_root}{bundle}_rip/{file}{extension}",
            path=f"{kind.directory}/{flatten_identifier(bundle)}-{sanitize_filename(file)}{extension}",
            kind=kind,
        )

    # ---------------- Live2D ----------------

    def costume_directory(self, costume: str) -> str:
        """Directory of a costume, relative to figure/."""
        name = sanitize_filename(costume).strip(". ")
        if not name:
            raise UnresolvableAsset(AssetKind.FIGURE.value, repr(costume), "empty costume name")
        return name

    def figure_manifest(self, costume: str) -> ResourceRef:
        """Name the buildData.asset manifest of a costume."""
        directory = self.costume_directory(costume)
        return ResourceRef(
            url=f"{self.urls.bundle_root}{self.urls.live2d_bundle}{costume}_rip/{LIVE2D_MANIFEST}",
            path=f"{AssetKind.FIGURE_MANIFEST.directory}/{directory}/{LIVE2D_MANIFEST}",
            kind=AssetKind.FIGURE_MANIFEST,
        )

    def figure_file(self, costume: str, bundle: str, file: str, local: str) -> ResourceRef:
        """Name one file listed in a costume's manifest.

        Args:
            costume: Costume name
            bundle: bundleName from the manifest
            file: fileName from the manifest
            local: Path inside the costume directory (e.g. "textures/t.png")
        """
        directory = self.costume_directory(costume)
        return ResourceRef(
            url=f"{self.urls.bundle_root}{bundle}_rip/{file}",
            path=f"{AssetKind.FIGURE.directory}/{directory}/{local}",
            kind=AssetKind.FIGURE,
        )

    def model_config_path(self, costume: str) -> str:
        """Destination of the WebGAL model.json of a costume."""
        return f"{AssetKind.FIGURE.directory}/{self.costume_directory(costume)}/{LIVE2D_CONFIG}"

    def model_script_path(self, costume: str) -> str:
        """Model path as written in changeFigure commands."""
        return f"{self.costume_directory(costume)}/{LIVE2D_CONFIG}"


class CostumeTracker:
    """Remembers the last costume each character appeared with.

    Layout and motion actions may leave the costume empty; they then refer
    to whatever the character wore last.
    """

    def __init__(self) -> None:
        self._last: dict[int, str] = {}

    def costume_for(self, character: int, costume: str) -> str | None:
        if costume:
            self._last[character] = costume
            return costume
        return self._last.get(character)
