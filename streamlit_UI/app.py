"""Streamlit front-end for the gacha pity simulator."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pity_core import (
    DEFAULT_TRIAL_COUNT,
    TIER_COLORS,
    TIER_LABELS,
    TRIAL_COUNT_OPTIONS,
    ExperimentResult,
    RateTable,
    SimulationSummary,
    configure,
    run_experiment,
)
from pity_core.reporting import (
    EMPIRICAL_SERIES,
    THEORETICAL_SERIES,
    cumulative_frame,
    histogram_frame,
    tier_frame,
)

# Deviation thresholds for highlighting, in percentage points and draws.
TIER_DEVIATION_HIGHLIGHT = 0.1
EXPECTED_DRAWS_HIGHLIGHT = 50.0
SERIES_LABELS = {THEORETICAL_SERIES: "理論値", EMPIRICAL_SERIES: "実測値"}
SERIES_DOMAIN = [SERIES_LABELS[THEORETICAL_SERIES], SERIES_LABELS[EMPIRICAL_SERIES]]
SERIES_COLORS = ["#8884d8", "#82ca9d"]


def ensure_session_state_defaults() -> None:
    """Populate Streamlit session state with expected default entries."""

    st.session_state.setdefault("experiment_result", None)
    st.session_state.setdefault("experiment_error", None)
    st.session_state.setdefault("trial_count_input", DEFAULT_TRIAL_COUNT)
    st.session_state.setdefault("use_fixed_seed", False)
    st.session_state.setdefault("seed_input", 42)


def render_rate_table(rate_table: RateTable) -> None:
    """Render the fixed tier rates and the pity threshold."""

    with st.container(border=True):
        st.markdown("**実験設定**")
        columns = st.columns(len(rate_table.tiers))
        for column, tier in zip(columns, rate_table.tiers):
            color = TIER_COLORS.get(tier.id, "#64748b")
            column.markdown(
                f'<div class="tier-card" style="border-color: {color};">'
                f"<strong>{TIER_LABELS.get(tier.id, tier.id)}</strong><br>"
                f"{tier.weight * 100:.1f}%</div>",
                unsafe_allow_html=True,
            )
        st.caption(
            f"天井システム: {rate_table.pity_threshold}回 · "
            f"1試行あたりの上限: {rate_table.max_draws_per_trial}回"
        )


def run_and_store(rate_table: RateTable) -> None:
    """Run the simulation with the current inputs and store the result."""

    st.session_state.experiment_error = None
    st.session_state.experiment_result = None
    seed = int(st.session_state.seed_input) if st.session_state.use_fixed_seed else None
    trial_count = int(st.session_state.trial_count_input)
    progress = st.progress(0.0, text="実行中...")

    def on_progress(completed: int, total: int) -> None:
        progress.progress(completed / total, text=f"実行中... {completed:,}/{total:,}")

    try:
        with st.spinner("シミュレーション実行中..."):
            st.session_state.experiment_result = run_experiment(
                trial_count,
                rate_table=rate_table,
                seed=seed,
                on_progress=on_progress,
            )
    except ValueError as exc:
        st.session_state.experiment_error = str(exc)
    finally:
        progress.empty()


def render_overview(result: ExperimentResult) -> None:
    summary = result.summary
    with st.container(border=True):
        st.markdown("**実験結果サマリー**")
        cols = st.columns(3)
        cols[0].metric("総ガチャ回数", f"{summary.total_draws:,}回")
        cols[1].metric("平均回数/1回の試行", f"{summary.average_draws_per_trial:.1f}回")
        cols[2].metric("試行回数", f"{summary.trial_count:,}回")
        st.caption(f"計算時間 {result.compute_seconds:.2f} 秒")
        if summary.capped_trials:
            st.warning(
                f"{summary.capped_trials}回の試行が上限に達し、殿堂を獲得できませんでした。",
                icon="⚠️",
            )


def highlight_deviation(value: Optional[float]) -> str:
    if value is None or pd.isna(value):
        return ""
    if abs(value) > TIER_DEVIATION_HIGHLIGHT:
        return "color: #dc2626; font-weight: bold;"
    return "color: #16a34a;"


def render_tier_table(result: ExperimentResult) -> None:
    """Render the theoretical vs. empirical rarity comparison."""

    frame = tier_frame(result.summary)
    display = frame[["label", "theoretical_pct", "empirical_pct", "deviation_pct", "count"]].rename(
        columns={
            "label": "レア度",
            "theoretical_pct": "理論値(%)",
            "empirical_pct": "実測値(%)",
            "deviation_pct": "差異",
            "count": "出現回数",
        }
    )
    styled = display.style.format(
        {
            "理論値(%)": "{:.1f}",
            "実測値(%)": "{:.3f}",
            "差異": "{:+.3f}",
            "出現回数": "{:,}",
        },
        na_rep="—",
    ).map(highlight_deviation, subset=["差異"])
    with st.container(border=True):
        st.markdown("**理論値と実測値の比較**")
        st.dataframe(styled, hide_index=True, use_container_width=True)


def render_expected_draws(result: ExperimentResult) -> None:
    expected = result.summary.expected_top_tier
    top_label = TIER_LABELS.get(result.summary.top_tier_id, result.summary.top_tier_id)
    with st.container(border=True):
        st.markdown(f"**{top_label}が出るまでの期待回数**")
        cols = st.columns(3)
        top_weight = result.rate_table.top_tier.weight
        cols[0].metric("理論値", f"{expected.theoretical:.1f}回")
        cols[0].caption(f"1/{top_weight:g} = {expected.theoretical:g}")
        if expected.empirical is None or expected.absolute_difference is None:
            cols[1].metric("実測値", "—")
            cols[2].metric("差異", "—")
            st.error("殿堂に到達した試行がないため、実測値を計算できません。")
            return
        cols[1].metric("実測値", f"{expected.empirical:.1f}回")
        cols[2].metric("差異", f"±{expected.absolute_difference:.1f}回")
        if expected.absolute_difference > EXPECTED_DRAWS_HIGHLIGHT:
            cols[2].caption(":red[理論値との差が大きい]")
        else:
            cols[2].caption(":green[理論値とほぼ一致]")


def build_cumulative_chart(summary: SimulationSummary) -> alt.Chart:
    """Build the theoretical vs. empirical cumulative line chart.

    The colour scale pins its domain so the theoretical line is always purple
    and the empirical line always green, whatever order Altair sorts labels in.
    """

    chart_data = cumulative_frame(summary)
    chart_data["series_label"] = chart_data["series"].map(SERIES_LABELS)
    return alt.Chart(chart_data).mark_line(point=True, strokeWidth=2).encode(
        x=alt.X("draw_count:Q", title="ガチャ回数", axis=alt.Axis(format=".0f")),
        y=alt.Y(
            "probability_pct:Q",
            title="確率(%)",
            scale=alt.Scale(domain=(0, 100)),
        ),
        color=alt.Color(
            "series_label:N",
            title=None,
            scale=alt.Scale(domain=SERIES_DOMAIN, range=SERIES_COLORS),
        ),
        tooltip=[
            alt.Tooltip("draw_count:Q", title="ガチャ回数"),
            alt.Tooltip("series_label:N", title="系列"),
            alt.Tooltip("probability_pct:Q", title="確率(%)", format=".1f"),
        ],
    ).properties(height=300)


def render_cumulative_chart(result: ExperimentResult) -> None:
    """Render theoretical and empirical cumulative probability lines."""

    chart = build_cumulative_chart(result.summary)
    chart = chart.configure_view(strokeOpacity=0).configure_axis(gridColor="#e2e8f0")
    with st.container(border=True):
        st.markdown("**累積確率の比較**")
        st.altair_chart(chart, use_container_width=True)


def render_histogram_chart(result: ExperimentResult) -> None:
    """Render the distribution of draws needed for the first top-tier outcome."""

    top_label = TIER_LABELS.get(result.summary.top_tier_id, result.summary.top_tier_id)
    chart_data = histogram_frame(result.summary)
    with st.container(border=True):
        st.markdown(f"**{top_label}出現回数の分布**")
        if chart_data["count"].sum() <= 0:
            st.caption("殿堂の出現サンプルがないため、分布図を省略しました。")
            return
        histogram = alt.Chart(chart_data).mark_bar(
            color="#8884d8",
            opacity=0.9,
            cornerRadiusTopLeft=2,
            cornerRadiusTopRight=2,
        ).encode(
            x=alt.X("range:N", title="ガチャ回数", sort=None),
            y=alt.Y("count:Q", title="出現回数"),
            tooltip=[
                alt.Tooltip("range:N", title="範囲"),
                alt.Tooltip("count:Q", title="出現回数"),
                alt.Tooltip("percentage:Q", title="割合(%)", format=".1f"),
            ],
        ).properties(height=300)
        histogram = histogram.configure_view(strokeOpacity=0)
        histogram = histogram.configure_axis(gridColor="#e2e8f0")
        st.altair_chart(histogram, use_container_width=True)


def render_notes(rate_table: RateTable) -> None:
    with st.container(border=True):
        st.markdown("**統計的考察**")
        st.markdown(
            "- **大数の法則の確認:** シミュレーション回数を増やすことで、実測値が理論値に近づく傾向が確認できます。\n"
            f"- **天井システムの効果:** {rate_table.pity_threshold}回の天井により、"
            "殿堂を引くまでの最大回数が制限されています。\n"
            "- **確率の偏り:** 少ないサンプル数では確率に偏りが生じやすく、十分なサンプル数が必要であることが分かります。"
        )


def apply_page_styling() -> None:
    """Inject CSS used by the tier cards."""

    st.set_page_config(page_title="ガチャ確率実験シミュレーター", layout="wide")
    st.markdown(
        """
        <style>
        div.block-container {
            padding-top: 1.5rem;
        }
        .tier-card {
            text-align: center;
            padding: 0.6rem;
            border: 2px solid;
            border-radius: 0.5rem;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def main() -> None:
    """Entry point used by Streamlit."""

    apply_page_styling()
    ensure_session_state_defaults()

    st.title("ガチャ確率実験シミュレーター")
    rate_table = configure()
    render_rate_table(rate_table)

    with st.container(border=True):
        count_col, seed_toggle_col, seed_col, button_col = st.columns([2, 1, 1, 1])
        count_col.selectbox(
            "シミュレーション回数",
            options=TRIAL_COUNT_OPTIONS,
            key="trial_count_input",
            format_func=lambda value: f"{value:,}回",
        )
        seed_toggle_col.checkbox("シード固定", key="use_fixed_seed")
        seed_col.number_input(
            "シード",
            key="seed_input",
            min_value=0,
            step=1,
            disabled=not st.session_state.use_fixed_seed,
        )
        run_clicked = button_col.button("実験開始", type="primary", use_container_width=True)

    if run_clicked:
        run_and_store(rate_table)

    if st.session_state.experiment_error:
        st.error(f"シミュレーション失敗：{st.session_state.experiment_error}")
    elif isinstance(st.session_state.experiment_result, ExperimentResult):
        result = st.session_state.experiment_result
        render_overview(result)
        render_tier_table(result)
        render_expected_draws(result)
        render_cumulative_chart(result)
        render_histogram_chart(result)
        render_notes(result.rate_table)


if __name__ == "__main__":
    main()
