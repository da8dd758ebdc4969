# screens/bulk_upload.py
from __future__ import annotations
import streamlit as st

from core.navigation import current_identity, require_route
from core.rbac import RoleAssignmentError
from core.user_import import ImportValidationError, import_users, read_user_frame, template_frame


@require_route("/students/bulk-upload")
def render(engine):
    st.title("📤 Bulk Upload")
    st.caption("Upload a CSV or Excel sheet with columns: email, first_name, last_name, role.")

    st.download_button(
        "⬇️ Download template",
        data=template_frame().to_csv(index=False).encode("utf-8"),
        file_name="users_template.csv",
        mime="text/csv",
    )

    upload = st.file_uploader("Users file", type=["csv", "xlsx", "xls"])
    if upload is None:
        return

    try:
        frame = read_user_frame(upload.getvalue(), filename=upload.name)
    except ImportValidationError as e:
        st.error(str(e))
        return

    st.markdown(f"**Preview** ({len(frame)} rows)")
    st.dataframe(frame.head(50), use_container_width=True, hide_index=True)

    if not st.button("📥 Import", type="primary"):
        return

    try:
        report = import_users(engine, current_identity(), frame)
    except RoleAssignmentError as e:
        st.error(str(e))
        return

    st.success(f"{len(report.created)} created, {len(report.updated)} updated.")
    if not report.ok:
        st.warning(f"{len(report.errors)} row(s) rejected.")
        st.dataframe(report.to_frame(), use_container_width=True, hide_index=True)
