"""Startup Scaling Meter (Streamlit)

UI/Experience

Principles:
- UI only renders + triggers.
- Meter physics and the step pipeline are pure Python modules (core/, engine/).
- Content comes from a validated local pack; the built-in default pack is used when none is uploaded.

Entry point: streamlit run app.py
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import streamlit as st

from core.config import DEFAULT_CONFIG, config_to_dict, merge_config, validate_config
from core.endings import calculate_ending
from core.rng import generate_seed
from core.state import DIMENSION_LABELS, DIMENSIONS, TOTAL_STEPS, Delta, RunState
from core.tiers import get_tier_config

from content.loader import default_content_pack, load_pack_text
from content.schemas import ContentPack

from engine.config import EngineConfig, flags_from_params, is_operator_mode
from engine.logging import dumps_run_export, loads_run_export, make_run_export
from engine.pipeline import apply_choice, start_run
from engine.replay import analyze_path_taken, generate_alternate_path_hints, generate_run_statistics
from engine.sim_runner import STRATEGIES, run_batch


APP_TITLE = "Startup Scaling Meter"
APP_SUBTITLE = "Five decisions, five hidden dimensions, one meter. (deterministic seeded runs)"
APP_VERSION = "1.0.0"

st.set_page_config(page_title=APP_TITLE, page_icon="🚀", layout="wide", initial_sidebar_state="expanded")

CSS = """
<style>
.block-container {padding-top: 3.2rem; padding-bottom: 2rem;}
section[data-testid="stSidebar"] .block-container {padding-top: 2.0rem;}
.card {
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 16px;
  padding: 14px 16px;
  background: rgba(255,255,255,0.03);
}
.pill {
  display: inline-block;
  padding: 2px 10px;
  border-radius: 999px;
  border: 1px solid rgba(255,255,255,0.12);
  font-size: 12px;
  opacity: .85;
}
.pill.warn {border-color: rgba(255,190,90,0.35);}
.pill.bad {border-color: rgba(255,120,120,0.25);}
hr.soft {border: none; border-top: 1px solid rgba(255,255,255,0.08); margin: 1rem 0;}
.small {font-size: 13px; opacity:.75;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)


def _delta_summary(delta: Delta) -> str:
    parts = []
    for d in DIMENSIONS:
        v = delta.get(d)
        if abs(v) >= 0.05:
            parts.append(f"{d} {v:+.1f}")
    return " · ".join(parts) if parts else "no change"


def _ensure_state() -> None:
    ss = st.session_state
    if "flags" not in ss:
        ss.flags = flags_from_params(st.query_params.to_dict())
    if "meter_config" not in ss:
        ss.meter_config = DEFAULT_CONFIG
    if "pack" not in ss:
        ss.pack = default_content_pack()
    if "base_seed" not in ss:
        ss.base_seed = int(ss.flags.fixed_seed) if ss.flags.fixed_seed is not None else generate_seed()
    if "run" not in ss:
        ss.run = None
    if "last_result" not in ss:
        ss.last_result = None


def _engine_config() -> EngineConfig:
    ss = st.session_state
    return EngineConfig(meter=ss.meter_config, flags=ss.flags)


def _reset_run() -> None:
    ss = st.session_state
    keep = {
        "flags": ss.get("flags"),
        "meter_config": ss.get("meter_config"),
        "pack": ss.get("pack"),
    }
    for k in list(ss.keys()):
        del ss[k]
    for k, v in keep.items():
        if v is not None:
            ss[k] = v
    _ensure_state()


def _start_run() -> None:
    ss = st.session_state
    ss.run = start_run(int(ss.base_seed), pack=ss.pack, config=_engine_config())
    ss.last_result = None


def _on_choose(choice: str) -> None:
    ss = st.session_state
    try:
        ss.run, ss.last_result = apply_choice(ss.run, choice, pack=ss.pack, config=_engine_config())
    except ValueError as e:
        st.error(f"Could not apply choice: {e}")
        return
    st.rerun()


# =========================
# Pages
# =========================


def page_setup() -> None:
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)
    pack: ContentPack = st.session_state.pack
    st.markdown(f"### {pack.title}")
    if pack.description:
        st.markdown(pack.description)
    st.info("Pick a seed in the sidebar and start a run.")


def render_meter(run: RunState) -> None:
    meter = run.meter_state
    tier_cfg = get_tier_config(meter.tier)
    step_label = f"{min(run.current_step, TOTAL_STEPS)}/{TOTAL_STEPS}" if not run.is_complete else "done"

    a, b, c = st.columns([1.0, 1.4, 1.0])
    a.metric("Step", step_label)
    b.progress(float(meter.display_value) / 100.0, text=f"Scaling meter: {meter.display_value:.1f}")
    c.metric("Tier", f"{tier_cfg.emoji} {tier_cfg.label}")
    st.caption(tier_cfg.description)


def render_last_result() -> None:
    r = st.session_state.last_result
    if r is None:
        return
    st.markdown("<div class='card'>", unsafe_allow_html=True)
    st.markdown(f"**Step {r.step_id}, option {r.choice}:** {r.meter_before:.1f} → {r.meter_after:.1f}")
    if r.unluck_message:
        pill = "bad" if r.perfect_storm else "warn"
        title = "Perfect Storm" if r.perfect_storm else "Unluck"
        st.markdown(f"<span class='pill {pill}'>{title}</span> {r.unluck_message}", unsafe_allow_html=True)
    for line in r.insights:
        st.markdown(f"- {line}")
    st.markdown("</div>", unsafe_allow_html=True)


def page_run() -> None:
    ss = st.session_state
    run: RunState = ss.run
    pack: ContentPack = ss.pack

    st.title(APP_TITLE)
    render_meter(run)
    render_last_result()

    if run.is_complete:
        page_ending(run)
        return

    step = pack.step(run.current_step)
    st.markdown("<hr class='soft'/>", unsafe_allow_html=True)
    st.markdown(f"### Step {step.id}: {step.title}")
    if step.subtitle:
        st.caption(step.subtitle)
    st.markdown(step.scenario)

    cols = st.columns(2)
    for col, choice in zip(cols, ("A", "B")):
        opt = step.option(choice)
        with col:
            st.markdown(f"#### {choice}. {opt.label}")
            st.markdown(opt.body)
            if ss.flags.show_hidden_state:
                st.markdown(f"<span class='pill'>{_delta_summary(opt.delta)}</span>", unsafe_allow_html=True)
            if st.button(f"Choose {choice}", key=f"choose_{step.id}_{choice}", use_container_width=True):
                _on_choose(choice)


def page_ending(run: RunState) -> None:
    ss = st.session_state
    ending = calculate_ending(run.meter_state.display_value, run.meter_state.hidden_state)

    st.markdown("<hr class='soft'/>", unsafe_allow_html=True)
    st.markdown(f"## {ending.emoji} {ending.title}")
    st.markdown(ending.description)

    a, b = st.columns(2)
    a.markdown("**Top drivers:** " + ", ".join(ending.top_drivers))
    b.markdown(f"**Bottleneck:** {ending.bottleneck}")
    st.markdown(f"**Next step:** {ending.next_step_suggestion}")

    stats = generate_run_statistics(run.step_history)
    st.caption(
        f"Path {analyze_path_taken(run.step_history)} · seed {run.seed} · "
        f"{stats.unluck_count} unluck · {stats.perfect_storm_count} perfect storm · "
        f"{stats.total_meter_change:+.1f} overall"
    )
    with st.expander("🧭 What if?"):
        for hint in generate_alternate_path_hints(run.step_history, ss.pack):
            st.markdown(f"- {hint}")


def page_history() -> None:
    ss = st.session_state
    st.title("History")
    run: Optional[RunState] = ss.run
    if run is None or not run.step_history:
        st.info("No steps yet.")
        return

    for r in reversed(run.step_history):
        st.markdown("<div class='card'>", unsafe_allow_html=True)
        st.markdown(f"#### Step {r.step_id}: option {r.choice}")
        st.markdown(f"{r.meter_before:.1f} → {r.meter_after:.1f} ({r.tier_before} → {r.tier_after})")
        if r.unluck_message:
            st.markdown(f"_{r.unluck_message}_")
        if ss.flags.show_hidden_state:
            st.markdown(f"<span class='small'>applied: {_delta_summary(r.applied_delta)}</span>", unsafe_allow_html=True)
        st.markdown("</div>", unsafe_allow_html=True)
        st.write("")


def page_tuning() -> None:
    ss = st.session_state
    st.title("Tuning")
    st.caption("Batch-simulate full runs headlessly. Overrides are merged over the current meter config.")

    raw = st.text_area(
        "Config overrides (JSON)",
        value=str(ss.get("tuning_overrides", "{}")),
        height=160,
        help='e.g. {"unluck": {"probability": 0.2}, "sigmoid": {"sigma": 9}}',
    )
    ss.tuning_overrides = raw

    c1, c2, c3 = st.columns(3)
    n_runs = c1.number_input("Runs", min_value=1, max_value=2000, value=200, step=50)
    strategy = c2.selectbox("Strategy", list(STRATEGIES), index=2)
    base_seed = c3.number_input("Base seed", value=123, step=1)

    cols = st.columns(2)
    with cols[0]:
        if st.button("Run batch", use_container_width=True):
            try:
                overrides: Dict[str, Any] = json.loads(raw or "{}")
                summary = run_batch(
                    int(n_runs),
                    pack=ss.pack,
                    base_seed=int(base_seed),
                    strategy=strategy,
                    config=_engine_config(),
                    config_overrides=overrides,
                )
            except ValueError as e:
                st.error(str(e))
            else:
                ss.tuning_summary = summary.to_dict()
    with cols[1]:
        if st.button("Apply overrides to play", use_container_width=True):
            try:
                cfg = merge_config(json.loads(raw or "{}"), base=DEFAULT_CONFIG)
            except ValueError as e:
                st.error(str(e))
            else:
                problems = validate_config(cfg)
                if problems:
                    st.error("\n".join(problems))
                else:
                    ss.meter_config = cfg
                    st.success("Meter config updated. New runs use it.")

    if ss.get("tuning_summary"):
        st.json(ss.tuning_summary)


def page_debug() -> None:
    ss = st.session_state
    st.title("Debug")

    st.subheader("Flags")
    st.json(asdict(ss.flags))

    st.subheader("Meter config")
    st.json(config_to_dict(ss.meter_config))

    run: Optional[RunState] = ss.run
    if run is not None:
        st.subheader("Hidden state")
        hidden = run.meter_state.hidden_state
        cols = st.columns(len(DIMENSIONS))
        for col, d in zip(cols, DIMENSIONS):
            col.metric(DIMENSION_LABELS[d], f"{hidden.get(d):+.1f}")
        st.caption(f"streak {run.meter_state.streak} · rng state {run.rng_state}")


# =========================
# Sidebar
# =========================


def export_import_controls() -> None:
    ss = st.session_state
    st.sidebar.markdown("---")
    st.sidebar.markdown("### Run Export / Import")

    run: Optional[RunState] = ss.run
    data = b""
    if run is not None:
        payload = make_run_export(run=run, config=ss.meter_config, pack_version=ss.pack.version)
        data = dumps_run_export(payload).encode("utf-8")
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    st.sidebar.download_button(
        "Download run file",
        data=data,
        file_name=f"scaling_meter_run_{stamp}.json",
        mime="application/json",
        disabled=run is None,
    )

    up = st.sidebar.file_uploader("Load run file", type=["json"], accept_multiple_files=False, key="run_upload")
    if up is not None and st.sidebar.button("Import run", use_container_width=True):
        try:
            loaded, cfg = loads_run_export(up.read().decode("utf-8"))
        except ValueError as e:
            st.sidebar.error(f"Import failed: {e}")
        else:
            if cfg is not None:
                ss.meter_config = cfg
            ss.run = loaded
            ss.base_seed = loaded.seed
            ss.last_result = loaded.step_history[-1] if loaded.step_history else None
            st.sidebar.success("Run loaded.")
            st.rerun()

    pack_up = st.sidebar.file_uploader("Content pack (JSON)", type=["json"], accept_multiple_files=False, key="pack_upload")
    if pack_up is not None and st.sidebar.button("Use pack", use_container_width=True, disabled=run is not None):
        try:
            ss.pack = load_pack_text(pack_up.read().decode("utf-8"))
        except ValueError as e:
            st.sidebar.error(str(e))
        else:
            st.sidebar.success(f"Pack loaded: {ss.pack.title}")


def sidebar() -> str:
    ss = st.session_state
    started = ss.run is not None

    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION} · pack {ss.pack.id}@{ss.pack.version}")
    st.sidebar.markdown("---")

    ss.base_seed = st.sidebar.number_input(
        "Seed", value=int(ss.base_seed), step=1, disabled=started or ss.flags.fixed_seed is not None
    )

    cols = st.sidebar.columns(2)
    with cols[0]:
        if st.button("Start run", disabled=started, use_container_width=True):
            _start_run()
            st.rerun()
    with cols[1]:
        if st.button("Reset", use_container_width=True):
            _reset_run()
            st.rerun()

    export_import_controls()

    st.sidebar.markdown("---")
    pages = ["Play", "History", "Tuning"]
    if ss.flags.enable_debug_console:
        pages.append("Debug")
    if is_operator_mode(ss.flags):
        st.sidebar.caption("operator mode")
    return st.sidebar.radio("Page", pages, index=0)


# =========================
# Main
# =========================


def main() -> None:
    _ensure_state()
    page = sidebar()
    ss = st.session_state

    if page == "Tuning":
        page_tuning()
    elif page == "Debug":
        page_debug()
    elif ss.run is None:
        page_setup()
    elif page == "Play":
        page_run()
    else:
        page_history()


if __name__ == "__main__":
    main()
