"""
Streamlit UI for the Kitchen Cleaning Quote Calculator.

Features:
- Job inputs in the sidebar with live recalculation
- Undo/redo over input changes
- Quote and profit breakdown tabs
- Rate configuration
- Export to CSV/Excel/text
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from kitchen_quote import __version__
from kitchen_quote.config.settings import get_settings, configure_logging
from kitchen_quote.engine.models import MARKUP_MODES, ROUNDING_METHODS
from kitchen_quote.exceptions import ExportError
from kitchen_quote.export.quote_summary import (
    session_summary, summary_to_frame, summary_text, export_csv, export_excel, format_currency,
)
from kitchen_quote.services.preferences import PreferencesStore
from kitchen_quote.services.quote_session import QuoteSession, RATE_FIELDS


st.set_page_config(
    page_title="Kitchen Cleaning Quote",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_preferences_store():
    """Get cached preferences store."""
    configure_logging(get_settings())
    store = PreferencesStore()
    store.load()
    return store


prefs = get_preferences_store()

if 'quote' not in st.session_state:
    st.session_state.quote = QuoteSession()
session: QuoteSession = st.session_state.quote


# ============================================================================
# WIDGET <-> SESSION SYNC
# ============================================================================
def _key(name: str) -> str:
    return f"in_{name}"


def _on_field_change(name: str):
    session.set_field(name, st.session_state[_key(name)])


def _on_rate_change(name: str):
    session.update_pricing_config(**{name: st.session_state[_key(name)]})


def _sync_widgets():
    """Push live model values into widget state (after undo/redo/clamping)."""
    for source in (session.params, session.options):
        for name, value in source.__dict__.items():
            if name != 'commission_splits':
                st.session_state[_key(name)] = value
    for name in RATE_FIELDS:
        st.session_state[_key(name)] = getattr(session.config, name)


_sync_widgets()


def number(label, name, step=1.0, integer=False, on_change=_on_field_change):
    if integer:
        st.number_input(label, step=1, key=_key(name), on_change=on_change, args=(name,))
    else:
        st.number_input(label, step=float(step), key=_key(name), on_change=on_change, args=(name,))


def toggle(label, name):
    st.checkbox(label, key=_key(name), on_change=_on_field_change, args=(name,))


# ============================================================================
# SIDEBAR: Job Inputs
# ============================================================================
with st.sidebar:
    st.header("🧽 Job Details")

    c1, c2 = st.columns(2)
    with c1:
        if st.button("↶ Undo", disabled=not session.history.can_undo, use_container_width=True):
            session.undo()
            st.rerun()
    with c2:
        if st.button("↷ Redo", disabled=not session.history.can_redo, use_container_width=True):
            session.redo()
            st.rerun()

    with st.container(border=True):
        number("Workers", "workers", integer=True)
        number("Hours per day", "hours", step=0.5)
        number("Days", "days", integer=True)
        number("Materials per day ($)", "materials_per_day", step=5)
        number("Equipment per day ($)", "equipment_per_day", step=5)

    with st.expander("🔥 Hood Cleaning"):
        number("Large hoods", "large_hoods", integer=True)
        number("Small hoods", "small_hoods", integer=True)
        number("Cleaning frequency", "hood_cleaning_frequency", integer=True)
        number("Hood labor cost (%)", "hood_labor_cost_perc")
        number("Hood material cost (%)", "hood_material_cost_perc")

    with st.expander("⚙️ Job Conditions", expanded=True):
        toggle("Holiday", "is_holiday")
        toggle("Outside Houston", "outside_houston")
        toggle("Include insurance", "include_insurance")
        toggle("Use subcontractor", "use_subcontractor")
        if session.params.use_subcontractor:
            number("Subcontractor cost ($)", "subcontractor_cost", step=50)

    st.divider()
    if st.checkbox("🌙 Dark mode", value=prefs.preferences.dark_mode):
        if not prefs.preferences.dark_mode:
            prefs.toggle_dark_mode()
    elif prefs.preferences.dark_mode:
        prefs.toggle_dark_mode()

    if st.button("🗑️ Reset Calculator", use_container_width=True):
        session.reset()
        st.toast("Calculator has been reset successfully.")
        st.rerun()

for message in session.pop_warnings():
    st.warning(message)


# ============================================================================
# MAIN CONTENT: TABBED INTERFACE
# ============================================================================
st.title("Kitchen Cleaning Quote Calculator")
st.caption(f"v{__version__} | {datetime.now().strftime('%Y-%m-%d')}")

result = session.result
options = session.options

tab1, tab2, tab3, tab4 = st.tabs(["⚡ Quotation", "📊 Breakdown", "💼 Profit Options", "🔧 Configuration"])


# ============================================================================
# TAB 1: QUOTATION
# ============================================================================
with tab1:
    if result is None:
        st.info("No result yet. Check your inputs.")
    else:
        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Grand Total", format_currency(result.grand_total))
        m2.metric("Net Profit", format_currency(result.net_profit))
        m3.metric("Company Profit", format_currency(result.final_company_profit))
        m4.metric("Cost / Profit", f"{result.cost_percentage}% / {result.profit_percentage}%")

        if result.is_optimization_active:
            st.info("Markup automatically optimized for 62% cost ratio")
        if result.is_target_achieved:
            st.success("🎯 62% cost target achieved")
        elif result.cost_percentage > 75:
            st.error("Costs exceed 75% of the price")

        summary = session_summary(session)
        st.dataframe(summary_to_frame(summary), use_container_width=True, hide_index=True)

        btn_col1, btn_col2, btn_col3 = st.columns(3)
        with btn_col1:
            st.download_button(
                "📥 CSV",
                data=export_csv(summary),
                file_name="kitchen_quote.csv",
                mime="text/csv",
                use_container_width=True
            )
        with btn_col2:
            try:
                st.download_button(
                    "📊 Excel",
                    data=export_excel(summary),
                    file_name="kitchen_quote.xlsx",
                    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                    use_container_width=True
                )
            except ExportError as e:
                st.warning(f"Some features are not available: {e}")
        with btn_col3:
            st.download_button(
                "🖨️ Printable",
                data=summary_text(summary),
                file_name="kitchen_quote.txt",
                mime="text/plain",
                use_container_width=True
            )


# ============================================================================
# TAB 2: BREAKDOWN
# ============================================================================
with tab2:
    if result is not None:
        op = result.operational
        st.subheader("Operational Costs")
        st.dataframe(pd.DataFrame([
            {'Item': 'Regular supplies', 'Percent': options.regular_supplies_percentage, 'Amount': op.regular_supplies},
            {'Item': 'Additional equipment', 'Percent': options.additional_equipment_percentage, 'Amount': op.additional_equipment},
            {'Item': 'Uniform & safety', 'Percent': options.uniform_safety_percentage, 'Amount': op.uniform_safety},
            {'Item': 'Communications', 'Percent': options.communications_percentage, 'Amount': op.communications},
            {'Item': 'Overhead', 'Percent': options.overhead_percentage, 'Amount': op.overhead},
        ]), use_container_width=True, hide_index=True)

        with st.expander("🔍 Calculation Trace"):
            st.text(result.get_trace_text())


# ============================================================================
# TAB 3: PROFIT OPTIONS
# ============================================================================
with tab3:
    col1, col2 = st.columns(2)
    with col1:
        st.selectbox("Markup mode", MARKUP_MODES, key=_key('markup_mode'),
                     on_change=_on_field_change, args=('markup_mode',))
        if options.markup_mode == 'custom':
            number("Custom markup (%)", "custom_markup_percentage", step=5)

        toggle("Residual percentage", "enable_residual_percentage")
        if options.enable_residual_percentage:
            number("Residual (%)", "residual_percentage_value")

        toggle("Initial fee", "enable_initial_fee")
        if options.enable_initial_fee:
            number("Initial fee ($)", "initial_fee_value", step=10)

        toggle("Round grand total", "enable_rounding")
        if options.enable_rounding:
            st.selectbox("Rounding", ROUNDING_METHODS, key=_key('rounding_method'),
                         on_change=_on_field_change, args=('rounding_method',))
            number("Round to ($)", "rounding_value", step=10)

    with col2:
        toggle("Include transport", "include_transport")
        toggle("Include materials", "include_materials")
        toggle("Include equipment", "include_equipment")

        toggle("Split commission", "enable_commission_split")
        if options.enable_commission_split:
            for i, split in enumerate(options.commission_splits):
                s1, s2 = st.columns([4, 1])
                with s1:
                    pct = st.number_input(split.name, value=float(split.percentage), step=0.5, key=f"split_{i}")
                    if pct != split.percentage:
                        session.set_commission_split(i, pct)
                        st.rerun()
                with s2:
                    if len(options.commission_splits) > 1 and st.button("✕", key=f"del_split_{i}"):
                        session.remove_commission_split(i)
                        st.rerun()
            if st.button("➕ Add split"):
                session.add_commission_split()
                st.rerun()
            if result is not None:
                st.caption(f"Total split: {result.commission_split_total_percentage:g}%")
        else:
            number("Commission (%)", "commission_percentage")

    with st.expander("Operational cost percentages"):
        number("Regular supplies (%)", "regular_supplies_percentage", step=0.25)
        number("Additional equipment (%)", "additional_equipment_percentage", step=0.25)
        number("Uniform & safety (%)", "uniform_safety_percentage", step=0.25)
        number("Communications (%)", "communications_percentage", step=0.25)
        number("Overhead (%)", "overhead_percentage", step=0.25)


# ============================================================================
# TAB 4: CONFIGURATION
# ============================================================================
with tab4:
    st.header("Rates")
    st.caption("Rate changes apply immediately and are not undoable.")
    c1, c2 = st.columns(2)
    labels = {
        'regular_pay_rate': "Regular pay rate ($/hr)",
        'supervisor_pay_rate': "Supervisor pay rate ($/hr)",
        'transport_cost_per_day': "Transport per day ($)",
        'outside_houston_transport_cost_per_day': "Outside Houston transport per day ($)",
        'large_hood_price': "Large hood price ($)",
        'small_hood_price': "Small hood price ($)",
        'work_comp_rate': "Workers' comp ($ per $100 labor)",
        'gl_rate': "General liability ($ per $1,000 price)",
    }
    for i, name in enumerate(RATE_FIELDS):
        with (c1 if i % 2 == 0 else c2):
            number(labels.get(name, name), name, step=0.01, on_change=_on_rate_change)
