"""
views/profile_view.py — 내 프로필

표시 내용:
  - 누적 통계 (테스트 수 / 평균·최고 WPM / 평균 정확도 / 전체 순위)
  - 언어별 숙련도
  - 획득한 업적
  - 최근 결과
"""

from __future__ import annotations

import streamlit as st

import config
from codetype.services.stats_service import build_user_profile
from codetype.views.context import get_storage

_LEVEL_COLORS = {
    "advanced": "#10b981",
    "intermediate": "#3b82f6",
    "beginner": "#9ca3af",
}


def _stat_card(col, label: str, value: str, color: str) -> None:
    with col:
        st.markdown(
            f"<div style='text-align:center;'>"
            f"<p style='font-size:1.6rem; font-weight:700; color:{color}; margin:0;'>{value}</p>"
            f"<p style='font-size:0.8rem; color:#9ca3af;'>{label}</p></div>",
            unsafe_allow_html=True,
        )


def _render_proficiency(profile, languages: dict) -> None:
    st.markdown("**언어별 숙련도**")
    if not profile.proficiency:
        st.caption("연습을 마치면 언어별 숙련도가 표시됩니다.")
        return
    for p in profile.proficiency:
        lang = languages.get(p.language_id)
        name = f"{lang.icon} {lang.display_name}" if lang else p.language_id
        color = _LEVEL_COLORS.get(p.proficiency_level, "#9ca3af")
        st.markdown(
            f"{name} — <span style='color:{color}; font-weight:600;'>{p.proficiency_level}</span> "
            f"<span style='color:#9ca3af;'>({p.average_wpm:.0f} WPM, {p.tests_completed}회)</span>",
            unsafe_allow_html=True,
        )


def _render_achievements(profile) -> None:
    st.markdown("**업적**")
    if not profile.achievements:
        st.caption("아직 획득한 업적이 없습니다.")
        return
    for ua in profile.achievements:
        a = ua.achievement
        if a is None:
            continue
        earned = ua.earned_at.strftime("%Y-%m-%d") if ua.earned_at else ""
        st.markdown(f"{a.icon} **{a.name}** · {a.description} <small>{earned}</small>", unsafe_allow_html=True)


def _render_recent(profile) -> None:
    st.markdown("**최근 결과**")
    if not profile.recent_results:
        st.caption("기록이 없습니다.")
        return
    storage = get_storage()
    rows = []
    for r in profile.recent_results:
        snippet = storage.get_code_snippet(r.snippet_id)
        minutes, seconds = divmod(r.time_spent, 60)
        rows.append({
            "스니펫": snippet.title if snippet else r.snippet_id,
            "WPM": round(r.wpm),
            "정확도": f"{r.accuracy:.1f}%",
            "오타": r.errors,
            "소요 시간": f"{minutes}:{seconds:02d}",
            "완료": r.completed_at.strftime("%m-%d %H:%M") if r.completed_at else "",
        })
    st.dataframe(rows, hide_index=True, use_container_width=True)


def render() -> None:
    """프로필 화면 렌더링."""
    storage = get_storage()
    profile = build_user_profile(storage, config.MOCK_USER_ID)
    languages = {lang.id: lang for lang in storage.get_languages()}
    stats = profile.stats
    name = (profile.user.username if profile.user else None) or config.MOCK_USERNAME

    _, col, _ = st.columns([0.6, 3, 0.6])

    with col:
        st.markdown('<div class="ct-card">', unsafe_allow_html=True)
        st.markdown(f'<p class="ct-title">👤 {name}</p>', unsafe_allow_html=True)

        s1, s2, s3, s4, s5 = st.columns(5)
        _stat_card(s1, "테스트", str(stats.total_tests), "#6366f1")
        _stat_card(s2, "평균 WPM", f"{stats.average_wpm:.0f}", "#3b82f6")
        _stat_card(s3, "최고 WPM", f"{stats.best_wpm:.0f}", "#06b6d4")
        _stat_card(s4, "평균 정확도", f"{stats.average_accuracy:.1f}%", "#10b981")
        rank = f"#{profile.global_rank}" if profile.global_rank else "Unranked"
        _stat_card(s5, "전체 순위", rank, "#f59e0b")

        st.markdown('<hr class="ct-divider">', unsafe_allow_html=True)

        left, right = st.columns(2)
        with left:
            _render_proficiency(profile, languages)
        with right:
            _render_achievements(profile)

        st.markdown('<hr class="ct-divider">', unsafe_allow_html=True)
        _render_recent(profile)

        if st.button("← 홈으로"):
            st.session_state.page = "home"
            st.rerun()

        st.markdown('</div>', unsafe_allow_html=True)
