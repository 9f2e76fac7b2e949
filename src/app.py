"""
Listing Matcher: Streamlit UI

Upload scraped store listings, group them into products and download the
grouped result as Excel.

Run with:
    streamlit run src/app.py
"""

import io
import logging

import pandas as pd
import streamlit as st

from grouping import (
    group_listings,
    groups_to_dataframe,
    listings_from_dataframe,
    summarize_groups,
)
from matcher import (
    INSULATION_SIMILARITY_THRESHOLD,
    SIMILARITY_THRESHOLD,
    extract_attributes,
    is_insulation_title,
    is_similar_title,
    score_breakdown,
)
from naming import get_standardized_group_name
from product_rules import RULES_VERSION

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Listing Matcher",
    page_icon="🔗",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.title("🔗 Store Listing Matcher")
st.markdown("**Group listings from different stores that refer to the same physical product**")

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.header("⚙️ Matching Rules")
st.sidebar.markdown(f"**Rules version:** `{RULES_VERSION}`")
st.sidebar.markdown(f"🟢 **Default threshold:** {SIMILARITY_THRESHOLD:.0%}")
st.sidebar.markdown(f"🧱 **Insulation threshold:** {INSULATION_SIMILARITY_THRESHOLD:.0%}")
st.sidebar.markdown(
    "Score = 45% model + 25% brand + 20% specs + 10% words, "
    "boosted for exact model / brand / spec agreement."
)
st.sidebar.divider()
st.sidebar.markdown("**Hard vetoes:**")
st.sidebar.markdown("- Knauf / Sakret / Weber: models must be identical")
st.sidebar.markdown("- Both titles with dimensions: dimensions must agree")


def _read_upload(upload) -> pd.DataFrame:
    if upload.name.lower().endswith('.csv'):
        return pd.read_csv(upload)
    return pd.read_excel(upload, engine='openpyxl')


def _to_excel(df_groups: pd.DataFrame, df_summary: pd.DataFrame) -> io.BytesIO:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df_groups.to_excel(writer, sheet_name='Groups', index=False)
        df_summary.to_excel(writer, sheet_name='Summary', index=False)
    output.seek(0)
    return output


tab_group, tab_pair = st.tabs(["📦 Group Listings", "🔍 Test a Pair"])

# =========================================================================
# TAB 1: GROUP LISTINGS
# =========================================================================
with tab_group:
    st.header("📦 Group Listings")

    sample_df = pd.DataFrame({
        'Store': ['Depo', 'Kruza', 'Ksenukai', 'Euronics'],
        'Title': [
            'Akmens vate Rockwool Rockmin Plus 100x600x1200mm',
            'Rockwool Rockmin 100x600x1200',
            'Samsung Galaxy S21 5G 128GB',
            'Samsung Galaxy S21 5G 128GB Phantom Grey',
        ],
        'Price': ['24,99 €', '23.50', '649.00', '659,99 €'],
        'URL': ['', '', '', ''],
    })
    sample_excel = io.BytesIO()
    with pd.ExcelWriter(sample_excel, engine='openpyxl') as writer:
        sample_df.to_excel(writer, sheet_name='Listings', index=False)
    sample_excel.seek(0)

    st.download_button(
        label="📥 Download Excel Template",
        data=sample_excel,
        file_name="listings_template.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    st.info("💡 **Tip:** Only a **Title** column is required. Price, Store, URL and Image columns are picked up when present.")

    upload = st.file_uploader(
        "📁 Upload listings (.xlsx or .csv)",
        type=["xlsx", "csv"],
        key="listing_upload",
    )

    if upload is not None:
        try:
            listings = listings_from_dataframe(_read_upload(upload))
        except Exception as e:
            st.error(f"Failed to parse: {e}")
            st.stop()

        if not listings:
            st.warning("No listings with a title were found in the upload.")
            st.stop()

        st.markdown(f"Loaded **{len(listings):,}** listings.")

        if st.button("🚀 Group Listings", type="primary", use_container_width=True):
            progress = st.progress(0, text="Grouping...")

            def on_progress(current, total):
                progress.progress(current / total, text=f"Grouping... {current:,}/{total:,}")

            groups = group_listings(listings, progress_callback=on_progress)
            progress.progress(1.0, text="✅ Grouping complete!")

            df_groups = groups_to_dataframe(groups)
            df_summary = summarize_groups(groups)

            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("Listings", f"{len(listings):,}")
            with col2:
                st.metric("Product Groups", f"{len(groups):,}")
            with col3:
                multi = sum(1 for g in groups if len(g.listings) > 1)
                st.metric("Groups with 2+ listings", f"{multi:,}")

            st.subheader("Summary")
            st.dataframe(df_summary, use_container_width=True, hide_index=True)

            with st.expander("All grouped listings"):
                st.dataframe(df_groups, use_container_width=True, hide_index=True)

            st.download_button(
                label="📥 Download Grouped Excel File",
                data=_to_excel(df_groups, df_summary),
                file_name="listing_groups.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                type="primary",
                use_container_width=True,
            )

# =========================================================================
# TAB 2: TEST A PAIR
# =========================================================================
with tab_pair:
    st.header("🔍 Test a Pair")
    st.markdown("Compare two listing titles and see how each factor contributed.")

    col_a, col_b = st.columns(2)
    with col_a:
        title1 = st.text_input("Title A", value="Knauf Rotband 30kg")
    with col_b:
        title2 = st.text_input("Title B", value="Knauf MP-75 30kg")

    if title1 and title2:
        breakdown = score_breakdown(title1, title2)
        same = is_similar_title(title1, title2)
        threshold = (
            INSULATION_SIMILARITY_THRESHOLD
            if is_insulation_title(title1) or is_insulation_title(title2)
            else SIMILARITY_THRESHOLD
        )

        if same:
            st.success(f"✅ SAME PRODUCT — score {breakdown['score']:.3f} (threshold {threshold:.2f})")
        else:
            st.error(f"❌ DIFFERENT — score {breakdown['score']:.3f} (threshold {threshold:.2f})")

        if breakdown['veto']:
            st.warning(f"Hard veto applied: {breakdown['veto']}")

        st.dataframe(
            pd.DataFrame([
                {'Factor': 'Model', 'Score': breakdown['model']},
                {'Factor': 'Brand', 'Score': breakdown['brand']},
                {'Factor': 'Specs', 'Score': breakdown['specs']},
                {'Factor': 'Words', 'Score': breakdown['words']},
                {'Factor': 'Weighted', 'Score': breakdown['weighted']},
            ]),
            use_container_width=True,
            hide_index=True,
        )
        if breakdown['bonuses']:
            st.caption("Bonuses: " + ", ".join(breakdown['bonuses']))

        rows = []
        for label, title in (('A', title1), ('B', title2)):
            attrs = extract_attributes(title)
            specs = attrs.specs
            rows.append({
                'Title': label,
                'Brand': attrs.brand or '',
                'Model': attrs.model or '',
                'Category': attrs.category.value,
                'Dimensions': 'x'.join(f"{v:g}" for v in specs.dimensions.raw) + specs.dimensions.unit
                if specs.dimensions else '',
                'Weight (kg)': specs.weight_kg,
                'Volume (l)': specs.volume_l,
                'Power (W)': specs.power_w,
                'Storage (GB)': specs.storage_gb,
            })
        st.subheader("Extracted attributes")
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

        st.markdown(f"**Group name if merged:** `{get_standardized_group_name([title1, title2])}`")
