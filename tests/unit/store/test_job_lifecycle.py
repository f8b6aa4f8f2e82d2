"""End-to-end: one job from invoice to consolidated work-order view."""

from __future__ import annotations

import base64
from datetime import date

from engrave.store.identity import JobKey


def test_jane_smith_lifecycle(repo, store, pdf_bytes, make_image):
    repo.save_invoice(
        "Jane Smith",
        "INV-0007",
        pdf_bytes,
        form_fields={
            "headStoneName": "Jane Smith",
            "invoiceNo": "INV-0007",
            "customerName": "Jane Smith",
            "deposit": "100",
        },
    )
    images = [make_image("jpeg", bytes([i])) for i in range(3)]
    repo.submit_to_cemetery("Jane Smith", "INV-0007", images)

    assert repo.list_jobs_by_name("smith") == [JobKey("Jane Smith", "INV-0007")]

    order = repo.get_invoice("INV-0007")
    assert order["deposits"] == [{"depositAmount": "100", "date": date.today().isoformat()}]

    view = repo.get_work_order("INV-0007")
    assert view.found is False
    assert view.deposits == [{"depositAmount": "100", "date": date.today().isoformat()}]
    assert view.to_dict()["deposits"] == view.deposits
    assert view.work_order.fields["customerName"] == "Jane Smith"

    cemetery = view.images["Cemetery_Submission"]
    assert len(cemetery) == 3
    decoded = sorted(
        base64.b64decode(img.inline_data.split(",", 1)[1]) for img in cemetery
    )
    assert decoded == sorted(img.content for img in images)
    assert all(img.inline_data.startswith("data:image/jpeg;base64,") for img in cemetery)

    repo.save_work_order("Jane Smith", "INV-0007", make_image(), {"headStoneName": "Jane Smith"})
    view = repo.get_work_order("INV-0007")
    assert view.found is True
    assert len(view.deposits) == 1
    assert len(view.images["Cemetery_Submission"]) == 3
