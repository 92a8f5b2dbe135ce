"""
Tests for the property page card markup.
"""

from flex_reviews.normalize import normalize_reviews
from streamlit_app import review_card_html


def test_review_card_escapes_review_text():
    [review] = normalize_reviews([{
        "id": 1,
        "rating": 10,
        "guestName": "<b>Eve</b>",
        "publicReview": "<script>alert(1)</script> & more",
        "submittedAt": "2024-09-05 10:00:00",
    }])

    card = review_card_html(review)

    assert "<script>" not in card
    assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; more" in card
    assert "<b>&lt;b&gt;Eve&lt;/b&gt;</b>" in card
    assert "5 Sept 2024" in card


def test_review_card_without_rating_or_date():
    [review] = normalize_reviews([{"id": 2, "guestName": "Sam"}])

    card = review_card_html(review)

    assert "⭐ N/A · No Rating" in card
    assert "Unknown" in card
