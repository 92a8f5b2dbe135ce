# streamlit_app.py
"""
Flex Living - Reviews Dashboard (Streamlit)
Single-file app on top of the flex_reviews core that:
- Loads Hostaway reviews (live API or mock fixture, per configuration)
- Filters and sorts reviews, shows KPIs, trends and per-property performance
- Lets a manager approve reviews for the public website (approval ledger)
- Renders the public property page from approved reviews only
"""

import asyncio
import html

import altair as alt
import pandas as pd
import streamlit as st

from flex_reviews import config
from flex_reviews.errors import ReviewsError
from flex_reviews.query import FilterCriteria, compute_stats, filter_reviews, sort_reviews
from flex_reviews.service import ReviewService

SORT_FIELDS = {"Date": "date", "Rating": "rating", "Guest name": "name", "Listing": "listing"}


# ----------------- Load Data -----------------
def load_reviews(service):
    return asyncio.run(service.get_normalized_reviews())


def load_approved(service, listing_id=None):
    return asyncio.run(service.get_approved(listing_id))


def set_approval(service, review_id: int, approved: bool):
    try:
        if approved:
            asyncio.run(service.approve(review_id))
        else:
            asyncio.run(service.unapprove(review_id))
    except ReviewsError as e:
        st.sidebar.error(f"Could not update review {review_id}: {e}")


def to_frame(reviews) -> pd.DataFrame:
    df = pd.DataFrame([r.to_dict() for r in reviews])
    if not df.empty:
        df["average_rating"] = pd.to_numeric(df["average_rating"], errors="coerce")
        df["year_month"] = [
            f"{int(y):04d}-{int(m):02d}" if pd.notna(y) and pd.notna(m) else None
            for y, m in zip(df["year"], df["month"])
        ]
    return df


# ----------------- Manager Dashboard -----------------
def render_dashboard(service, reviews, approved_ids):
    st.title("Flex Living — Reviews Dashboard")
    st.write("Manager view • See per-property performance, filter reviews, and choose which reviews appear on the public website.")

    st.sidebar.header("Filters & Controls")
    listings = ["All"] + sorted({r.listing_name for r in reviews if r.listing_name})
    selected_listing = st.sidebar.selectbox("Property (listing)", listings, index=0)
    types = ["All"] + sorted({r.type for r in reviews if r.type})
    selected_type = st.sidebar.selectbox("Review type", types, index=0)
    statuses = ["All"] + sorted({r.status for r in reviews if r.status})
    selected_status = st.sidebar.selectbox("Status", statuses, index=0)
    min_rating = st.sidebar.slider("Minimum rating", 0.0, 10.0, 0.0, step=0.5)

    dates = [r.submitted_at[:10] for r in reviews if r.timestamp and r.submitted_at]
    date_range = None
    if dates:
        date_range = st.sidebar.date_input(
            "Date range", [pd.Timestamp(min(dates)).date(), pd.Timestamp(max(dates)).date()]
        )

    search_text = st.sidebar.text_input("Search guest, listing or review text")
    sort_label = st.sidebar.selectbox("Sort by", list(SORT_FIELDS), index=0)
    sort_order = st.sidebar.radio("Order", ["desc", "asc"], horizontal=True)

    start_date = end_date = None
    if date_range and len(date_range) == 2:
        start_date = pd.Timestamp(date_range[0], tz="UTC").to_pydatetime()
        end_date = (pd.Timestamp(date_range[1], tz="UTC") + pd.Timedelta(days=1)).to_pydatetime()

    criteria = FilterCriteria(
        listing=None if selected_listing == "All" else selected_listing,
        min_rating=min_rating or None,
        type=None if selected_type == "All" else selected_type,
        status=None if selected_status == "All" else selected_status,
        start_date=start_date,
        end_date=end_date,
        search=search_text or None,
    )

    filtered = sort_reviews(filter_reviews(reviews, criteria), SORT_FIELDS[sort_label], sort_order)
    stats = compute_stats(filtered)

    # ----------------- KPIs -----------------
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Properties", value=len({r.listing_name for r in reviews}))
    with col2:
        st.metric("Reviews (filtered)", value=f"{stats['total']} / {len(reviews)}")
    with col3:
        st.metric("Avg rating (filtered)", value=stats["average_rating"] or "N/A")
    with col4:
        shown = sum(1 for r in filtered if r.id in approved_ids)
        st.metric("Shown on website (filtered)", value=shown)

    st.markdown("---")

    left, right = st.columns([2, 3])
    df = to_frame(filtered)

    with left:
        st.subheader("Trends & Distributions")
        rated = df[df["average_rating"].notna()] if not df.empty else df
        if not rated.empty:
            trend = rated.groupby("year_month").agg(
                avg_rating=("average_rating", "mean"), count=("id", "count")
            ).reset_index()
            chart = alt.Chart(trend).mark_line(point=True).encode(
                x=alt.X("year_month:T", title="Month"),
                y=alt.Y("avg_rating:Q", title="Avg rating"),
                tooltip=["year_month", alt.Tooltip("avg_rating:Q", format=".2f"), "count"],
            ).properties(height=250)
            st.altair_chart(chart, use_container_width=True)

            distribution = pd.DataFrame(
                list(stats["rating_distribution"].items()), columns=["bucket", "reviews"]
            )
            bars = alt.Chart(distribution).mark_bar().encode(
                x=alt.X("bucket:N", sort=["excellent", "good", "average", "poor"], title="Rating band"),
                y=alt.Y("reviews:Q", title="Reviews"),
            ).properties(height=200)
            st.altair_chart(bars, use_container_width=True)
        else:
            st.info("No rated reviews match your filters.")

        st.subheader("Per-property performance")
        if not df.empty:
            df["approved"] = df["id"].isin(approved_ids)
            summary = df.groupby("listing_name").agg(
                avg_rating=("average_rating", "mean"),
                reviews=("id", "count"),
                pct_displayed=("approved", "mean"),
            ).reset_index()
            summary["avg_rating"] = summary["avg_rating"].round(2)
            summary["pct_displayed"] = (summary["pct_displayed"] * 100).round(1).astype(str) + "%"
            st.dataframe(summary.sort_values(["avg_rating", "reviews"], ascending=[False, False]), height=220)
        else:
            st.write("No property matches filters.")

    with right:
        st.subheader("Reviews (filtered)")
        if not filtered:
            st.write("No reviews to show.")
            return

        page_size = 8
        total = len(filtered)
        page = st.number_input("Page", min_value=1, max_value=(total - 1) // page_size + 1, value=1, step=1)
        start = (page - 1) * page_size
        end = start + page_size

        for review in filtered[start:end]:
            cols = st.columns([6, 1])
            with cols[0]:
                st.markdown(f"**{review.listing_name}** — {review.guest_name} • {review.formatted_date or 'Unknown date'}")
                rating = review.average_rating if review.average_rating is not None else "N/A"
                st.write(f"**Rating:** {rating} ({review.rating_label}) • **Type:** {review.type} • **Status:** {review.status}")
                if review.comment:
                    st.write(review.comment)
                if review.categories:
                    st.caption(" • ".join(f"{k}: {v}" for k, v in review.categories.items()))
            with cols[1]:
                is_approved = review.id in approved_ids
                val = st.checkbox("Show", value=is_approved, key=f"display_{review.id}")
                if val != is_approved:
                    set_approval(service, review.id, val)
                    st.rerun()

        st.markdown(f"Showing {start + 1}-{min(end, total)} of {total} reviews (filtered).")


# ----------------- Public View: Property Page -----------------
def render_property_page(service, reviews):
    st.title("Flex Living — Property Page")
    st.write("Public view • Reviews shown here are only those approved by managers.")

    listing_ids = sorted({r.listing_id for r in reviews if r.listing_id is not None})
    if not listing_ids:
        st.info("No properties available.")
        return

    names = {}
    for r in reviews:
        if r.listing_id is not None:
            names.setdefault(r.listing_id, r.listing_name)
    selected_id = st.selectbox("Select Property", listing_ids, format_func=lambda i: f"{names[i]} (#{i})")

    st.subheader(names[selected_id])
    st.write("Property description and details would go here (mockup).")

    st.markdown("### Guest Reviews")
    approved = sort_reviews(load_approved(service, selected_id), "date", "desc")
    if not approved:
        st.info("No reviews approved for this property yet.")
        return

    for review in approved:
        st.markdown(review_card_html(review), unsafe_allow_html=True)


def review_card_html(review) -> str:
    """Public review card; every review-supplied value is HTML-escaped."""
    rating = review.average_rating if review.average_rating is not None else "N/A"
    label = html.escape(str(review.rating_label))
    comment = html.escape(review.comment or "")
    guest = html.escape(review.guest_name or "")
    date = html.escape(review.formatted_date or "Unknown")
    return f"""
        <div style="
            background-color: #ffffff;
            border-radius: 16px;
            padding: 20px;
            margin-bottom: 20px;
            box-shadow: 0 4px 12px rgba(0,0,0,0.1);
            border-left: 6px solid #1b3b36;
        ">
            <h4 style="margin: 0; color:#333;">⭐ {rating} · {label}</h4>
            <p style="margin: 6px 0; font-size: 16px; color:#555;">“{comment}”</p>
            <p style="margin: 0; font-size: 14px; color:#888;">
                — <b>{guest}</b> • {date}
            </p>
        </div>
        """


def main():
    st.set_page_config(page_title="Flex Living — Reviews Dashboard", layout="wide")
    config.setup_logging()

    service = ReviewService.from_config()
    try:
        reviews = load_reviews(service)
    except ReviewsError as e:
        st.error(f"Could not load reviews: {e}")
        st.stop()

    approved_ids = {r.id for r in load_approved(service)}

    # Sidebar: data source status
    st.sidebar.subheader("Data Source")
    if config.USE_MOCK_DATA:
        st.sidebar.warning("Using mock data ⚠️")
    else:
        st.sidebar.success("Connected to Hostaway API ✅")

    view_mode = st.sidebar.radio("View Mode", ["Manager Dashboard", "Public Property Page"])
    if view_mode == "Public Property Page":
        render_property_page(service, reviews)
    else:
        render_dashboard(service, reviews, approved_ids)


# `streamlit run` executes this file as __main__
if __name__ == "__main__":
    main()
