"""
Tests for registry record extraction.

Covers:
- bundle fields, displayName precedence, icon joining
- tolerance to missing optional fields
- dropping records without their required fields
- object-id suffix stripping on grouping keys
- splitting raw dump text into tagged records
"""

from openwith.models import Rank, RawRecord, RecordKind
from openwith.records import extract, normalize_ext, parse_bundle, parse_claim, split_dump, strip_object_suffix
from tests.factories import bundle_text, claim_text


class TestParseBundle:
    def test_all_fields(self):
        text = bundle_text(
            "Writer.app",
            name="Writer",
            path="/Applications/Writer.app",
            identifier="com.example.writer",
            icon="Contents/Resources/AppIcon.icns",
        )
        bundle = parse_bundle(text)
        assert bundle.key == "Writer.app"
        assert bundle.name == "Writer"
        assert bundle.path == "/Applications/Writer.app"
        assert bundle.identifier == "com.example.writer"
        assert bundle.icon == "/Applications/Writer.app/Contents/Resources/AppIcon.icns"

    def test_display_name_preferred_over_name(self):
        text = bundle_text("w.app", name="writer", display_name="Writer Pro", path="/Applications/w.app")
        assert parse_bundle(text).name == "Writer Pro"

    def test_display_name_alone_is_enough(self):
        text = bundle_text("w.app", display_name="Writer", path="/Applications/w.app")
        assert parse_bundle(text).name == "Writer"

    def test_parenthesised_path_is_kept_whole(self):
        bundle = parse_bundle(bundle_text("Foo.app", name="Foo", path="/Applications/Foo (Beta).app"))
        assert bundle.path == "/Applications/Foo (Beta).app"

    def test_missing_optional_fields(self):
        bundle = parse_bundle(bundle_text("Tool", name="Tool"))
        assert bundle.path == ""
        assert bundle.icon is None
        assert bundle.identifier is None

    def test_icon_needs_a_path(self):
        bundle = parse_bundle(bundle_text("Tool", name="Tool", icon="icon.icns"))
        assert bundle.icon is None

    def test_missing_name_is_dropped(self):
        assert parse_bundle(bundle_text("Ghost.app", path="/Applications/Ghost.app")) is None

    def test_empty_text_is_dropped(self):
        assert parse_bundle("") is None
        assert parse_bundle("   \n") is None

    def test_key_without_object_id(self):
        bundle = parse_bundle(bundle_text("Plain.app", name="Plain", object_id=""))
        assert bundle.key == "Plain.app"


class TestParseClaim:
    def test_fields(self):
        claim = parse_claim(claim_text("Writer.app", ["public.plain-text", "public.text"], rank="Owner"))
        assert claim.rank == Rank.OWNER
        assert claim.content_types == ["public.plain-text", "public.text"]
        assert claim.bundle_key == "Writer.app"

    def test_missing_rank_is_none(self):
        claim = parse_claim(claim_text("Writer.app", ["public.plain-text"], rank=None))
        assert claim.rank == Rank.NONE

    def test_unknown_rank_is_none(self):
        assert parse_claim(claim_text("W.app", ["public.text"], rank="Shared")).rank == Rank.NONE

    def test_extension_match_never_read_from_raw_data(self):
        assert parse_claim(claim_text("W.app", ["public.text"], rank="ExtensionMatch")).rank == Rank.NONE

    def test_missing_bindings_is_dropped(self):
        assert parse_claim(claim_text("Writer.app", None)) is None

    def test_missing_bundle_is_dropped(self):
        assert parse_claim(claim_text(None, ["public.text"])) is None

    def test_bundle_key_matches_bundle_key_despite_different_object_ids(self):
        bundle = parse_bundle(bundle_text("Writer.app", name="Writer", object_id="0xdead"))
        claim = parse_claim(claim_text("Writer.app", ["public.text"]))
        assert claim.bundle_key == bundle.key


class TestHelpers:
    def test_strip_object_suffix(self):
        assert strip_object_suffix("Foo.app (0x1A2B)") == "Foo.app"
        assert strip_object_suffix("Foo (beta).app") == "Foo (beta).app"
        assert strip_object_suffix("  Foo.app  ") == "Foo.app"

    def test_normalize_ext(self):
        assert normalize_ext(".MD") == "md"
        assert normalize_ext("txt") == "txt"
        assert normalize_ext("") == ""


class TestExtract:
    def test_splits_and_drops(self):
        records = [
            RawRecord(RecordKind.BUNDLE, bundle_text("A.app", name="A")),
            RawRecord(RecordKind.BUNDLE, bundle_text("B.app")),
            RawRecord(RecordKind.CLAIM, claim_text("A.app", ["public.text"])),
            RawRecord(RecordKind.CLAIM, claim_text("A.app", None)),
        ]
        bundles, claims = extract(records)
        assert [b.key for b in bundles] == ["A.app"]
        assert len(claims) == 1


DUMP = """Checking data integrity......done.
Status: Database is seeded.
--------------------------------------------------------------------------------
bundle id:                  Writer.app (0x1a2b)
class:                      kLSBundleClassApplication
name:                       Writer
identifier:                 com.example.writer (0x8000)
path:                       /Applications/Writer.app (0x3c4d)
--------------------------------------------------------------------------------
claim id:                   Plain Text (0x5e6f)
rank:                       Owner
bundle:                     Writer.app (0x1a2b)
bindings:                   public.plain-text
--------------------------------------------------------------------------------
type id:                    public.plain-text (0x9999)
--------------------------------------------------------------------------------
"""


class TestSplitDump:
    def test_tags_bundle_and_claim_records(self):
        records = split_dump(DUMP)
        assert [r.kind for r in records] == [RecordKind.BUNDLE, RecordKind.CLAIM]

    def test_records_parse(self):
        bundles, claims = extract(split_dump(DUMP))
        assert bundles[0].key == "Writer.app"
        assert bundles[0].path == "/Applications/Writer.app"
        assert claims[0].bundle_key == "Writer.app"
        assert claims[0].rank == Rank.OWNER

    def test_non_text_input(self):
        assert split_dump(None) == []
        assert split_dump("") == []
