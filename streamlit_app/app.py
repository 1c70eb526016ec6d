from __future__ import annotations

import pandas as pd
import streamlit as st

from production_report.config import get_settings
from production_report.errors import ReportError
from production_report.logging_config import configure_logging
from production_report.pipeline import PipelineState, ReportSession
from production_report.report.charts import (
    annual_series,
    annual_title,
    bar_chart,
    line_chart,
    monthly_series,
    quarterly_series,
)
from production_report.report.export_pdf import build_pdf_bytes, report_filename
from production_report.report.tables import annual_table, monthly_table, quarterly_tables
from production_report.schema import INDICATOR_FIELDS, indicator_label

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="Производственный отчет", layout="wide")
st.title("🏭 Производственный отчет по цехам")

# =====================================================
# Session (one report per browser session)
# =====================================================
if "report_session" not in st.session_state:
    configure_logging(None)
    try:
        session = ReportSession(get_settings())
    except RuntimeError as exc:  # invalid .env values
        st.error(f"Configuration error: {exc}")
        st.stop()
    session.load_cached()
    st.session_state["report_session"] = session

session: ReportSession = st.session_state["report_session"]


def center_dataframe(df: pd.DataFrame):
    """Center-align column headers and values for display."""
    return (
        df.style
        .set_properties(**{"text-align": "center"})
        .set_table_styles(
            [{"selector": "th", "props": [("text-align", "center")]}]
        )
    )


# =====================================================
# SECTION 0 — DATA SOURCE
# =====================================================
with st.sidebar:
    st.header("📂 Данные")
    upload = st.file_uploader("CSV файл", type=["csv"])
    url = st.text_input("или URL (CSV)", value="")
    use_feed = st.checkbox("URL — табличный JSON-фид", value=False)

    if st.button("Загрузить", type="primary"):
        try:
            if upload is not None:
                session.load_bytes(upload.getvalue(), upload.name)
            elif url.strip() and use_feed:
                session.load_feed(url.strip())
            elif url.strip():
                session.load_url(url.strip())
            elif session.settings.feed_url:
                session.load_feed()
            else:
                st.warning("Пожалуйста, выберите CSV файл")
        except ReportError as exc:
            st.error(f"Ошибка обработки файла: {exc}")

    for warning in session.warnings:
        st.warning(warning)
    session.warnings.clear()

    if session.model is not None:
        st.caption(f"Загружен: {session.model.source_name}")

model = session.model
if session.state is not PipelineState.READY or model is None or model.is_empty:
    st.info("Загрузите CSV с колонками Цех, Месяц, Выпуск, Брак, Простой.")
    st.stop()

tab_charts, tab_monthly, tab_quarterly, tab_annual = st.tabs(
    ["Графики", "По месяцам", "Квартальные отчеты", "Годовой отчет"]
)

# =====================================================
# SECTION 1 — ANNUAL CHARTS PER INDICATOR
# =====================================================
with tab_charts:
    field = st.selectbox("Показатель", INDICATOR_FIELDS, format_func=indicator_label)
    st.altair_chart(
        bar_chart(annual_series(model, field), annual_title(field), model.workshops).properties(height=320),
        width="stretch",
    )
    st.altair_chart(
        line_chart(quarterly_series(model, field), f"По кварталам: {indicator_label(field)}").properties(height=320),
        width="stretch",
    )

# =====================================================
# SECTION 2 — MONTHLY VIEW OF ONE WORKSHOP
# =====================================================
with tab_monthly:
    workshop = st.selectbox("Цех", model.workshops, format_func=lambda w: f"Цех {w}")
    fields = st.multiselect(
        "Показатели",
        INDICATOR_FIELDS,
        default=["output", "defect_rate", "downtime"],
        format_func=indicator_label,
    )
    if fields:
        st.altair_chart(
            line_chart(monthly_series(model, workshop, fields), f"Цех {workshop}").properties(height=320),
            width="stretch",
        )
    st.dataframe(center_dataframe(monthly_table(model, workshop)), width="stretch", hide_index=True)

# =====================================================
# SECTION 3 — QUARTERLY TABLES
# =====================================================
with tab_quarterly:
    for quarter, frame in quarterly_tables(model).items():
        st.subheader(quarter)
        st.dataframe(center_dataframe(frame), width="stretch", hide_index=True)

# =====================================================
# SECTION 4 — ANNUAL TABLE + PDF
# =====================================================
with tab_annual:
    st.dataframe(center_dataframe(annual_table(model)), width="stretch", hide_index=True)
    st.download_button(
        "📄 Экспорт в PDF",
        data=build_pdf_bytes(model, session.settings.pdf_font_path),
        file_name=report_filename(model.generated_at),
        mime="application/pdf",
    )

# =====================================================
# Footer
# =====================================================
st.caption(f"Цеха 1–{session.settings.workshops_count} • pandas • Altair • Streamlit • reportlab")
