import pytest

from dmarc_digest.errors import (
    ArchiveExtractionError,
    MailStructureError,
    MboxReadError,
    MissingSubjectError,
    SchemaError,
    UnsupportedAttachmentError,
)
from dmarc_digest.loader import (
    NO_SUBJECT,
    load_reports,
    load_reports_from_bytes,
    read_mbox,
)
from dmarc_digest.model import DispositionType
from dmarc_digest.model.tests.sample_data import MINIMAL_XML
from dmarc_digest.tests.sample_emails import (
    create_email,
    create_gzip_report_email,
    create_mbox,
    create_zip_report_email,
    patched_zip_bytes,
    zip_bytes,
)


def test_skips_message_with_unsupported_attachment():
    mbox = create_mbox(
        [
            create_zip_report_email(report_id="1"),
            create_email(
                subject="Not a report", attachment=b"%PDF", subtype="pdf", filename="x.pdf"
            ),
            create_gzip_report_email(report_id="3"),
        ]
    )

    result = load_reports_from_bytes(mbox)

    assert [r.report_metadata.report_id for r in result.reports] == ["1", "3"]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].subject == "Not a report"
    assert isinstance(result.diagnostics[0].error, UnsupportedAttachmentError)


def test_minimal_report_inherits_sp(tmp_path):
    path = tmp_path / "reports.mbox"
    path.write_bytes(
        create_mbox(
            [
                create_email(
                    subject="Report domain: example.com",
                    attachment=zip_bytes(MINIMAL_XML),
                )
            ]
        )
    )

    result = load_reports(path)

    assert result.diagnostics == []
    assert len(result.reports) == 1
    assert result.reports[0].report_metadata.report_id == "1"
    assert result.reports[0].policy_published.sp == DispositionType.REJECT


def test_schema_failure_skips_only_that_message():
    mbox = create_mbox(
        [
            create_email(subject="Broken", attachment=zip_bytes("<feedback/>")),
            create_zip_report_email(report_id="2"),
        ]
    )

    result = load_reports_from_bytes(mbox)

    assert [r.report_metadata.report_id for r in result.reports] == ["2"]
    assert [d.subject for d in result.diagnostics] == ["Broken"]
    assert isinstance(result.diagnostics[0].error, SchemaError)


def test_missing_subject_uses_placeholder():
    mbox = create_mbox(
        [create_email(subject=None, attachment=zip_bytes(MINIMAL_XML))]
    )

    result = load_reports_from_bytes(mbox)

    assert result.reports == []
    assert result.diagnostics[0].subject == NO_SUBJECT
    assert isinstance(result.diagnostics[0].error, MissingSubjectError)
    assert NO_SUBJECT in str(result.diagnostics[0])


def test_keeps_mailbox_order_and_duplicates():
    mbox = create_mbox(
        [
            create_zip_report_email(report_id="b", begin=1607385600),
            create_zip_report_email(report_id="a"),
            create_zip_report_email(report_id="b", begin=1607385600),
        ]
    )
    result = load_reports_from_bytes(mbox)
    assert [r.report_metadata.report_id for r in result.reports] == ["b", "a", "b"]


def test_mbox_without_messages_yields_nothing():
    result = load_reports_from_bytes(b"just some text\nwithout separators\n")
    assert result.reports == []
    assert result.diagnostics == []


def test_structurally_broken_message_is_fatal():
    mbox = create_mbox([create_zip_report_email()]) + (
        b"From x@y Mon\nSubject: s\nMIME-Version: 1.0\n"
        b"Content-Type: multipart/mixed\n\nbody\n"
    )
    with pytest.raises(MailStructureError):
        load_reports_from_bytes(mbox)


def test_unreadable_file_is_fatal(tmp_path):
    missing = tmp_path / "missing.mbox"
    with pytest.raises(MboxReadError) as err:
        read_mbox(missing)
    assert err.value.path == missing
    with pytest.raises(MboxReadError):
        load_reports(tmp_path)


@pytest.mark.parametrize("headers", [{"flag_bits": 0x1}, {"compress_type": 99}])
def test_unreadable_zip_skips_only_that_message(headers):
    mbox = create_mbox(
        [
            create_email(
                subject="Locked", attachment=patched_zip_bytes(MINIMAL_XML, **headers)
            ),
            create_zip_report_email(report_id="2"),
        ]
    )

    result = load_reports_from_bytes(mbox)

    assert [r.report_metadata.report_id for r in result.reports] == ["2"]
    assert [d.subject for d in result.diagnostics] == ["Locked"]
    assert isinstance(result.diagnostics[0].error, ArchiveExtractionError)
