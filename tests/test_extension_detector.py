import struct
import zipfile

from augmentor.modules.bootstrap.detection import EXTENSION_METADATA_ENTRY, ExtensionDetector, parse_properties

ARC_METADATA = (
    "#Generated by the extension plugin\n"
    "name=ArC\n"
    "deployment-artifact=io.quarkus\\:quarkus-arc-deployment\\:3.2.0\n"
    "groupId=io.quarkus\n"
    "artifactId=quarkus-arc\n"
    "version=3.2.0\n"
)


def test_parse_properties_handles_escapes_and_comments():
    props = parse_properties(
        "# comment\n! another\nplain=value\ncolon: spaced \nescaped=a\\:b\\=c\nflag\n\n"
    )

    assert props == {"plain": "value", "colon": "spaced", "escaped": "a:b=c", "flag": ""}


def test_detects_extension_in_repository_layout(make_jar):
    jar = make_jar(
        "maven2/io/quarkus/quarkus-arc/3.2.0/quarkus-arc-3.2.0.jar",
        {EXTENSION_METADATA_ENTRY: ARC_METADATA, "io/quarkus/arc/Arc.class": "x"},
    )

    descriptor = ExtensionDetector().detect(jar)

    assert descriptor is not None
    assert descriptor.coordinate.key == "io.quarkus:quarkus-arc"
    assert descriptor.declared_companion == "io.quarkus:quarkus-arc-deployment:3.2.0"
    assert descriptor.declared_companion_name == "quarkus-arc-deployment"
    assert descriptor.expected_companion_name == "quarkus-arc-deployment"
    assert descriptor.properties["name"] == "ArC"


def test_plain_archive_is_not_an_extension(make_jar):
    jar = make_jar("maven2/org/slf4j/slf4j-api/2.0.9/slf4j-api-2.0.9.jar")

    detector = ExtensionDetector()

    assert detector.detect(jar) is None
    assert not detector.is_extension(jar)


def test_metadata_supplies_coordinates_when_path_has_none(make_jar):
    jar = make_jar("bin/extension.jar", {EXTENSION_METADATA_ENTRY: ARC_METADATA})

    descriptor = ExtensionDetector().detect(jar)

    assert str(descriptor.coordinate) == "io.quarkus:quarkus-arc:3.2.0"


def test_extension_without_declared_companion_uses_convention(make_jar):
    jar = make_jar("libs/acme-cache-1.0.jar", {EXTENSION_METADATA_ENTRY: "name=Acme cache\n"})

    descriptor = ExtensionDetector().detect(jar)

    assert descriptor.declared_companion is None
    assert descriptor.expected_companion_name == "acme-cache-deployment"


def test_exploded_directory_archive(tmp_path):
    root = tmp_path / "classes" / "acme-ext-2.1"
    (root / "META-INF").mkdir(parents=True)
    (root / "META-INF" / "quarkus-extension.properties").write_text("deployment-artifact=org.acme:acme-ext-deployment:2.1\n")

    descriptor = ExtensionDetector().detect(root)

    assert descriptor.coordinate.name == "acme-ext"
    assert descriptor.declared_companion_name == "acme-ext-deployment"


def test_unreadable_archives_are_skipped(tmp_path, make_jar, caplog):
    broken = tmp_path / "libs" / "broken-1.0.jar"
    broken.parent.mkdir(parents=True)
    broken.write_bytes(b"not a zip")
    missing = tmp_path / "libs" / "missing-1.0.jar"
    good = make_jar("libs/acme-ext-1.0.jar", {EXTENSION_METADATA_ENTRY: "name=acme\n"})

    extensions = ExtensionDetector().detect_all([broken, missing, good])

    assert [ext.archive_path for ext in extensions] == [good]
    assert "broken-1.0.jar" in caplog.text


def test_thread_pool_scan_keeps_input_order(make_jar):
    jars = [
        make_jar(f"libs/ext{i}-1.0.jar", {EXTENSION_METADATA_ENTRY: f"name=ext{i}\n"}) for i in range(4)
    ]
    jars.insert(2, make_jar("libs/plain-1.0.jar"))

    extensions = ExtensionDetector(workers=3).detect_all(jars)

    assert [ext.coordinate.name for ext in extensions] == ["ext0", "ext1", "ext2", "ext3"]


def test_custom_companion_suffix(build_settings, make_jar):
    jar = make_jar("libs/acme-ext-1.0.jar", {EXTENSION_METADATA_ENTRY: "name=acme\n"})
    detector = ExtensionDetector.from_settings(build_settings(companion_suffix="-build"))

    assert detector.detect(jar).expected_companion_name == "acme-ext-build"


def test_corrupt_compressed_metadata_is_skipped(tmp_path, make_jar, caplog):
    corrupt = tmp_path / "libs" / "corrupt-ext-1.0.jar"
    corrupt.parent.mkdir(parents=True)
    with zipfile.ZipFile(corrupt, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(EXTENSION_METADATA_ENTRY, ARC_METADATA * 20)
    with zipfile.ZipFile(corrupt) as zf:
        header_offset = zf.getinfo(EXTENSION_METADATA_ENTRY).header_offset
    raw = bytearray(corrupt.read_bytes())
    name_len, extra_len = struct.unpack("<HH", raw[header_offset + 26 : header_offset + 30])
    data_start = header_offset + 30 + name_len + extra_len
    raw[data_start : data_start + 12] = b"\xff" * 12
    corrupt.write_bytes(bytes(raw))
    good = make_jar("libs/acme-ext-1.0.jar", {EXTENSION_METADATA_ENTRY: "name=acme\n"})

    extensions = ExtensionDetector().detect_all([corrupt, good])

    assert [ext.archive_path for ext in extensions] == [good]
    assert "corrupt-ext-1.0.jar" in caplog.text


def test_latin1_metadata_is_still_an_extension(tmp_path):
    jar = tmp_path / "maven2/io/x/ext/1.0/ext-1.0.jar"
    jar.parent.mkdir(parents=True)
    with zipfile.ZipFile(jar, "w") as zf:
        zf.writestr(
            EXTENSION_METADATA_ENTRY,
            "name=Caf\xe9 extension\ndeployment-artifact=io.x:ext-deployment:1.0\n".encode("latin-1"),
        )

    descriptor = ExtensionDetector().detect(jar)

    assert descriptor is not None
    assert descriptor.properties["name"] == "Café extension"
    assert descriptor.declared_companion_name == "ext-deployment"


def test_latin1_metadata_in_exploded_directory(tmp_path):
    root = tmp_path / "classes" / "acme-ext-2.1"
    (root / "META-INF").mkdir(parents=True)
    (root / "META-INF" / "quarkus-extension.properties").write_bytes("name=Gr\xfcn\n".encode("latin-1"))

    descriptor = ExtensionDetector().detect(root)

    assert descriptor.properties["name"] == "Grün"
