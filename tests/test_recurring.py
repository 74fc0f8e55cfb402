#!/usr/bin/env python3
"""
test_recurring.py

Unit tests for narration fingerprints and recurring payment detection.

Tests:
- Fingerprint stability under date / reference / txn-id substitution
- Monthly EMI series scored and flagged
- Person-to-person UPI transfers never recurring
- Food delivery with high amount variance excluded
- Two-row groups need a recurring keyword
- Inventory ordering and signature references
"""

import unittest
from pathlib import Path
import sys

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from statement_engine.classification import classify_rows
from statement_engine.fingerprint import fingerprint, normalize_for_fingerprint, same_fingerprint
from statement_engine.models import RawTransaction
from statement_engine.recurring import (
    CONFIRMED_CONFIDENCE,
    PROBABLE_CONFIDENCE,
    detect_recurring,
    has_recurring_keyword,
    mark_recurring,
    score_group,
)


def _debits(rows):
    raws = [RawTransaction(d, n, withdrawal_amount=a) for d, n, a in rows]
    txns, skipped = classify_rows(raws)
    assert skipped == 0
    return txns


EMI_ROWS = [
    ("05/01/2024", "ACH D STAFF LOAN EMI REC 05-JAN-2024 REF 1234567890", 15000.0),
    ("05/02/2024", "ACH D STAFF LOAN EMI REC 05-FEB-2024 REF 1234567891", 15200.0),
    ("06/03/2024", "ACH D STAFF LOAN EMI REC 06-MAR-2024 REF 1234567892", 14900.0),
    ("04/04/2024", "ACH D STAFF LOAN EMI REC 04-APR-2024 REF 1234567893", 15100.0),
]


class TestFingerprint(unittest.TestCase):
    """Narration fingerprint."""

    def test_dates_and_txn_ids_stripped(self):
        a = "ACH D STAFF LOAN EMI REC 12/01/2024 A54152"
        b = "ACH D STAFF LOAN EMI REC 12/02/2024 A61877"
        self.assertEqual(normalize_for_fingerprint(a), "ACH D STAFF LOAN EMI REC")
        self.assertEqual(fingerprint(a), fingerprint(b))
        self.assertTrue(same_fingerprint(a, b))

    def test_reference_and_masked_account_stripped(self):
        self.assertEqual(
            normalize_for_fingerprint("NEFT XXXXXX1234 RENT 2024-03-01 REF 99887766554433"),
            "NEFT RENT REF",
        )
        self.assertEqual(
            fingerprint("ACH D STAFF LOAN EMI REC 12-JAN-2024 REF 1234567890"),
            fingerprint("ACH D STAFF LOAN EMI REC 12-FEB-2024 REF 9988776655"),
        )

    def test_different_counterparties_differ(self):
        self.assertNotEqual(fingerprint("NETFLIX SUBSCRIPTION"), fingerprint("SPOTIFY SUBSCRIPTION"))

    def test_empty(self):
        self.assertEqual(fingerprint(""), "")
        self.assertEqual(fingerprint("12/01/2024"), "")
        self.assertFalse(same_fingerprint("", ""))

    def test_hex_digest(self):
        fp = fingerprint("NETFLIX SUBSCRIPTION")
        self.assertEqual(len(fp), 64)
        int(fp, 16)


class TestRecurringDetection(unittest.TestCase):
    """Signature grouping and scoring."""

    def test_single_row_not_recurring(self):
        txns = _debits(EMI_ROWS[:1])
        self.assertEqual(detect_recurring(txns), [])

    def test_monthly_emi_series(self):
        txns = _debits(EMI_ROWS)
        inventory = detect_recurring(txns)
        self.assertEqual(len(inventory), 1)
        entry = inventory[0]
        self.assertEqual(entry.frequency, "MONTHLY")
        self.assertGreaterEqual(entry.confidence, CONFIRMED_CONFIDENCE)
        self.assertEqual(entry.count, 4)
        self.assertEqual(entry.first_seen, "05/01/2024")
        self.assertEqual(entry.last_seen, "04/04/2024")
        self.assertEqual(entry.day_of_month, 5)
        self.assertAlmostEqual(entry.amount, 15050.0)

        marked = mark_recurring(txns, inventory)
        self.assertTrue(all(t.is_recurring for t in marked))
        self.assertTrue(all(t.signature == entry.signature for t in marked))
        self.assertEqual(marked[0].recurring.frequency, "MONTHLY")

    def test_p2p_transfers_never_recurring(self):
        txns = _debits([
            ("06/01/2024", "UPI-RAHUL SHARMA-rahul@ybl-REF 223344556677", 12000.0),
            ("06/02/2024", "UPI-RAHUL SHARMA-rahul@ybl-REF 223344556688", 12000.0),
            ("06/03/2024", "UPI-RAHUL SHARMA-rahul@ybl-REF 223344556699", 12000.0),
        ])
        self.assertEqual(detect_recurring(txns), [])
        self.assertFalse(any(t.is_recurring for t in mark_recurring(txns, [])))

    def test_food_delivery_variance_excluded(self):
        txns = _debits([
            ("03/01/2024", "UPI-SWIGGY-SWIGGY@ICICI-REF 300000000001", 200.0),
            ("03/02/2024", "UPI-SWIGGY-SWIGGY@ICICI-REF 300000000002", 800.0),
            ("03/03/2024", "UPI-SWIGGY-SWIGGY@ICICI-REF 300000000003", 450.0),
        ])
        self.assertEqual(detect_recurring(txns), [])

    def test_two_rows_need_keyword(self):
        plain = _debits([
            ("10/01/2024", "POS 416021XXXXXX1234 BIGBASKET", 999.0),
            ("10/02/2024", "POS 416021XXXXXX1234 BIGBASKET", 999.0),
        ])
        self.assertEqual(score_group(plain), (0, ""))

        keyed = _debits([
            ("10/01/2024", "ACH D- NETFLIX SUBSCRIPTION-998877", 649.0),
            ("10/02/2024", "ACH D- NETFLIX SUBSCRIPTION-998878", 649.0),
        ])
        confidence, frequency = score_group(keyed)
        self.assertGreaterEqual(confidence, PROBABLE_CONFIDENCE)
        self.assertEqual(frequency, "MONTHLY")

    def test_keyword_boundaries(self):
        self.assertTrue(has_recurring_keyword("ACH D- HDFC CC BILL"))
        self.assertFalse(has_recurring_keyword("SAVINGS ACCOUNT"))

    def test_inventory_ordering_and_references(self):
        rows = EMI_ROWS + [
            ("10/01/2024", "ACH D- NETFLIX SUBSCRIPTION-998877", 649.0),
            ("10/02/2024", "ACH D- NETFLIX SUBSCRIPTION-998878", 649.0),
        ]
        txns = _debits(rows)
        inventory = detect_recurring(txns)
        self.assertEqual(len(inventory), 2)
        confidences = [rp.confidence for rp in inventory]
        self.assertEqual(confidences, sorted(confidences, reverse=True))

        marked = mark_recurring(txns, inventory)
        by_signature = {rp.signature: rp for rp in inventory}
        for t in marked:
            if t.is_recurring:
                matches = [rp for rp in inventory if rp.signature == t.signature]
                self.assertEqual(len(matches), 1)
                self.assertGreaterEqual(by_signature[t.signature].confidence, PROBABLE_CONFIDENCE)


if __name__ == "__main__":
    unittest.main()
