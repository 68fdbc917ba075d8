"""Locate and parse the EPUB package document (OPF).

Resolution is a linear chain with early exits::

    container.xml -> rootfile@full-path -> OPF bytes -> manifest -> spine

Each failed step raises ``PackageResolutionError`` carrying a
``FailureReason``. Parsing is namespace-agnostic and runs lxml in recover
mode, since real-world OPF files are frequently malformed.
"""

import logging
import posixpath
from collections.abc import Iterator
from dataclasses import dataclass, field

from lxml import etree

from book_extract.core.archive import ArchiveReader, resolve_href
from book_extract.exceptions import PackageResolutionError
from book_extract.models.extraction import FailureReason
from book_extract.models.settings import ExtractionSettings

log = logging.getLogger(__name__)


def parse_xml(data: bytes) -> etree._Element | None:
    """Parse XML leniently. Returns None when nothing salvageable remains."""
    # lxml parsers must not be shared between threads
    parser = etree.XMLParser(recover=True, resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(data.lstrip(), parser)
    except etree.XMLSyntaxError:
        return None


def local_name(element: etree._Element) -> str:
    """Tag name without namespace URI or prefix, lower-cased."""
    tag = element.tag
    if not isinstance(tag, str):  # comments, processing instructions
        return ""
    return tag.rsplit("}", 1)[-1].rsplit(":", 1)[-1].lower()


def get_attr(element: etree._Element, name: str) -> str | None:
    """Attribute value by local name, ignoring any namespace."""
    value = element.get(name)
    if value is not None:
        return value
    for key, value in element.attrib.items():
        if key.rsplit("}", 1)[-1].rsplit(":", 1)[-1] == name:
            return value
    return None


def iter_elements(root: etree._Element | None, name: str) -> Iterator[etree._Element]:
    """Yield all elements with the given local name, in document order."""
    if root is None:
        return
    for element in root.iter():
        if local_name(element) == name:
            yield element


@dataclass
class ManifestItem:
    """Single resource declared in the manifest."""

    id: str
    href: str
    media_type: str | None = None
    properties: list[str] = field(default_factory=list)


@dataclass
class PackageDocument:
    """Parsed manifest and spine of one package document."""

    opf_path: str
    root: etree._Element | None
    manifest: dict[str, ManifestItem] = field(default_factory=dict)
    spine: list[str] = field(default_factory=list)

    @property
    def opf_dir(self) -> str:
        return posixpath.dirname(self.opf_path) or "."

    def href_path(self, href: str) -> str:
        """Archive path of an href relative to the package document."""
        return resolve_href(self.opf_dir, href)

    def item_path(self, item_id: str) -> str | None:
        """Archive path of a manifest item, or None for unknown ids."""
        item = self.manifest.get(item_id)
        if item is None:
            return None
        return self.href_path(item.href)

    def stylesheets(self) -> list[ManifestItem]:
        """Manifest items that are CSS files, in declaration order."""
        return [
            item for item in self.manifest.values() if item.href.lower().endswith(".css")
        ]

    def elements(self, name: str) -> Iterator[etree._Element]:
        return iter_elements(self.root, name)

    def first_text(self, name: str) -> str | None:
        """Trimmed text of the first element with this local name."""
        for element in self.elements(name):
            text = "".join(element.itertext()).strip()
            if text:
                return text
        return None


def find_package_path(archive: ArchiveReader, settings: ExtractionSettings) -> str:
    """Read the container descriptor and return the OPF path."""
    container = archive.read(settings.container_path)
    if container is None:
        raise PackageResolutionError(
            FailureReason.MISSING_CONTAINER,
            "Could not read EPUB: missing container.xml",
        )

    for rootfile in iter_elements(parse_xml(container), "rootfile"):
        full_path = get_attr(rootfile, "full-path")
        if full_path and full_path.strip():
            return full_path.strip()

    raise PackageResolutionError(
        FailureReason.PACKAGE_PATH_NOT_FOUND,
        "Could not find OPF file in EPUB",
    )


def parse_manifest(root: etree._Element | None) -> dict[str, ManifestItem]:
    """Collect id -> item pairs. Later duplicates replace earlier ones."""
    manifest: dict[str, ManifestItem] = {}
    for element in iter_elements(root, "item"):
        item_id = get_attr(element, "id")
        href = get_attr(element, "href")
        if not item_id or not href:
            continue
        manifest[item_id] = ManifestItem(
            id=item_id,
            href=href,
            media_type=get_attr(element, "media-type"),
            properties=(get_attr(element, "properties") or "").split(),
        )
    return manifest


def parse_spine(root: etree._Element | None) -> list[str]:
    """Collect itemref idrefs in reading order."""
    spine: list[str] = []
    for element in iter_elements(root, "itemref"):
        idref = get_attr(element, "idref")
        if idref:
            spine.append(idref)
    return spine


def resolve_package(
    archive: ArchiveReader,
    settings: ExtractionSettings | None = None,
    require_spine: bool = True,
) -> PackageDocument:
    """Run the resolution chain and return the parsed package document.

    Args:
        archive: Open EPUB archive
        settings: Extraction settings (container location)
        require_spine: Fail when the spine is empty. The metadata pass only
            needs the manifest and turns this off.

    Raises:
        PackageResolutionError: On any structural absence
    """
    settings = settings or ExtractionSettings()
    opf_path = find_package_path(archive, settings)

    opf_bytes = archive.read(opf_path)
    if opf_bytes is None:
        raise PackageResolutionError(
            FailureReason.PACKAGE_UNREADABLE,
            "Could not read OPF file",
        )

    root = parse_xml(opf_bytes)
    if root is None:
        log.warning(f"Package document {opf_path} could not be parsed")

    package = PackageDocument(
        opf_path=opf_path,
        root=root,
        manifest=parse_manifest(root),
        spine=parse_spine(root),
    )
    log.debug(
        f"Resolved {opf_path}: {len(package.manifest)} manifest items, "
        f"{len(package.spine)} spine entries"
    )

    if require_spine and not package.spine:
        raise PackageResolutionError(
            FailureReason.EMPTY_SPINE,
            "No chapters found in EPUB spine",
        )

    return package
