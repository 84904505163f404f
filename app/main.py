"""
Streamlit Frontend for RentBook

This is the interface the landlord uses to keep tenant, property,
invoice and expense records and to print rent invoices.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Nothing changes without an explicit button press
3. Clear error messages in simple language
4. Visual feedback for all operations
"""

from datetime import date
from decimal import Decimal

import streamlit as st
from pydantic import ValidationError

from rentbook.billing import (
    InvoiceValidationError,
    format_date,
    format_inr,
    selectable_cycles,
)
from rentbook.config import get_settings, validate_all_settings
from rentbook.models import (
    DocumentType,
    Expense,
    ExpenseCategory,
    FontFamily,
    HeaderLayout,
    InvoiceDraft,
    InvoiceSettings,
    InvoiceStatus,
    LineItem,
    Property,
    PropertyType,
    Tenant,
    TenantStatus,
)
from rentbook.orchestrator import PortfolioService, PropertyInUseError, create_app_components
from rentbook.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="RentBook",
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .danger-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


PAGES = [
    "📊 Dashboard",
    "🧾 Invoices",
    "👥 Tenants",
    "🏢 Properties",
    "💸 Expenses",
    "📑 Reports",
    "⚙️ Settings",
]


@st.cache_resource
def get_service() -> PortfolioService:
    """Get or create the application service (cached across sessions)."""
    return create_app_components()


def main():
    """Main application entry point."""
    try:
        service = get_service()
    except (StorageError, ValueError) as e:
        st.error(f"Failed to open your records: {e}")
        st.stop()

    st.sidebar.title(f"🏠 {service.get_company().name}")
    st.sidebar.markdown("---")
    page = st.sidebar.radio("Navigate to:", PAGES, index=0)

    if page == "📊 Dashboard":
        render_dashboard_page(service)
    elif page == "🧾 Invoices":
        render_invoices_page(service)
    elif page == "👥 Tenants":
        render_tenants_page(service)
    elif page == "🏢 Properties":
        render_properties_page(service)
    elif page == "💸 Expenses":
        render_expenses_page(service)
    elif page == "📑 Reports":
        render_reports_page(service)
    elif page == "⚙️ Settings":
        render_settings_page(service)


def _property_label(service: PortfolioService) -> dict[str, str]:
    return {p.id: p.display_name for p in service.list_properties()}


def render_dashboard_page(service: PortfolioService):
    st.title("📊 Dashboard")
    summary = service.dashboard()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Invoiced", format_inr(summary.total_invoiced))
    col2.metric("Collected", format_inr(summary.total_collected))
    col3.metric("Outstanding", format_inr(summary.outstanding))
    col4.metric("Net Income", format_inr(summary.net_income))

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Properties", summary.property_count)
    col2.metric("Occupancy", f"{summary.occupancy_rate:.1f}%")
    col3.metric("Active Tenants", summary.active_tenant_count)
    col4.metric("Expenses", format_inr(summary.total_expenses))

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("### Units by type")
        st.table({"Type": list(summary.units_by_type), "Units": list(summary.units_by_type.values())})
    with col2:
        st.markdown("### Invoices by status")
        st.table({
            "Status": list(summary.invoices_by_status),
            "Invoices": list(summary.invoices_by_status.values()),
        })


def render_invoices_page(service: PortfolioService):
    st.title("🧾 Invoices")
    tenants = service.list_tenants()
    settings = get_settings().app

    with st.expander("➕ New invoice", expanded=not service.list_invoices()):
        if not tenants:
            st.info("Add a tenant first.")
        else:
            with st.form("new_invoice"):
                st.caption(f"Next invoice number: {service.engine.next_invoice_id()}")
                tenant = st.selectbox("Tenant", tenants, format_func=lambda t: t.name)
                cycles = [c.label for c in selectable_cycles(service.engine.today())]
                col1, col2 = st.columns(2)
                with col1:
                    period = st.selectbox("Billing period", cycles)
                    document_type = st.radio(
                        "Document type", list(DocumentType), format_func=lambda d: d.value, horizontal=True
                    )
                with col2:
                    set_due = st.checkbox(
                        "Set due date manually",
                        value=settings.due_date_policy == "manual",
                    )
                    due = st.date_input("Due date", value=service.engine.today())

                st.markdown("**Particulars**")
                items = []
                for idx, description in enumerate(settings.default_line_items_list + ["", ""]):
                    c1, c2 = st.columns([3, 1])
                    text = c1.text_input("Description", value=description, key=f"desc_{idx}",
                                         label_visibility="collapsed")
                    amount = c2.number_input("Amount", min_value=0.0, step=100.0, key=f"amt_{idx}",
                                             label_visibility="collapsed")
                    if text.strip() and amount > 0:
                        items.append(LineItem(description=text, amount=Decimal(str(amount))))
                notes = st.text_area("Notes", value="")

                if st.form_submit_button("Create invoice", type="primary"):
                    try:
                        invoice = service.create_invoice(InvoiceDraft(
                            tenant_id=tenant.id,
                            items=items,
                            billing_period=period,
                            due_date=due if set_due else None,
                            notes=notes or None,
                            document_type=document_type,
                        ))
                        st.success(f"✅ Created {invoice.id} for {format_inr(invoice.total_amount)}")
                    except (InvoiceValidationError, ValidationError) as e:
                        st.error(str(e))

    st.markdown("---")
    names = {t.id: t.name for t in tenants}
    invoices = service.list_invoices()
    if not invoices:
        st.info("No invoices yet.")
        return

    for invoice in invoices:
        header = (
            f"{invoice.id} · {names.get(invoice.tenant_id, 'Valued Tenant')} · "
            f"{format_inr(invoice.total_amount)} · {invoice.status.value}"
        )
        with st.expander(header):
            st.markdown(
                f"**Period:** {invoice.billing_period}  \n"
                f"**Created:** {format_date(invoice.created_date)} · "
                f"**Due:** {format_date(invoice.due_date)} · "
                f"**Received:** {format_date(invoice.received_date, '-')}"
            )
            for item in invoice.items:
                st.markdown(f"- {item.description}: {format_inr(item.amount)}")

            col1, col2, col3 = st.columns(3)
            with col1:
                status = st.selectbox(
                    "Status",
                    list(InvoiceStatus),
                    index=list(InvoiceStatus).index(invoice.status),
                    format_func=lambda s: s.value,
                    key=f"status_{invoice.id}",
                )
                if status != invoice.status and st.button("Update status", key=f"upd_{invoice.id}"):
                    service.set_invoice_status(invoice.id, status)
                    st.rerun()
            with col2:
                if st.button("📄 Prepare PDF", key=f"prep_{invoice.id}"):
                    st.session_state[f"pdf_{invoice.id}"] = service.render_invoice_pdf(invoice.id)
                prepared = st.session_state.get(f"pdf_{invoice.id}")
                if prepared:
                    filename, data = prepared
                    st.download_button(
                        "⬇️ Download PDF",
                        data=data,
                        file_name=filename,
                        mime="application/pdf",
                        key=f"dl_{invoice.id}",
                    )
                if st.button("💾 Save to folder", key=f"save_{invoice.id}"):
                    path = service.save_invoice_pdf(invoice.id, settings.output_dir)
                    st.success(f"Saved {path}")
            with col3:
                if st.button("🗑️ Delete", key=f"del_{invoice.id}"):
                    service.delete_invoice(invoice.id)
                    st.rerun()


def render_tenants_page(service: PortfolioService):
    st.title("👥 Tenants")
    labels = _property_label(service)

    with st.expander("➕ Add tenant"):
        with st.form("new_tenant", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                name = st.text_input("Name *")
                email = st.text_input("Email")
                phone = st.text_input("Phone")
            with col2:
                address = st.text_area("Address")
                property_id = st.selectbox(
                    "Property",
                    [""] + list(labels),
                    format_func=lambda pid: labels.get(pid, "Unassigned"),
                )
                move_in = st.date_input("Move in date", value=date.today())
            if st.form_submit_button("Save tenant", type="primary"):
                if not name.strip():
                    st.error("Please enter the tenant's name")
                else:
                    service.save_tenant(Tenant(
                        name=name,
                        email=email,
                        phone=phone,
                        address=address,
                        property_id=property_id,
                        move_in_date=move_in,
                    ))
                    st.success("✅ Tenant saved")

    uploaded = st.file_uploader("📥 Import tenants from CSV", type=["csv"], key="tenant_csv")
    if uploaded and st.button("Import tenants"):
        result = service.import_tenants_csv(uploaded.getvalue().decode("utf-8-sig"))
        st.success(result.message)
        if result.skipped:
            st.warning(f"{result.skipped} empty rows were skipped.")

    st.markdown("---")
    for tenant in service.list_tenants():
        with st.expander(f"{tenant.name} · {labels.get(tenant.property_id, 'Unassigned')} · {tenant.status.value}"):
            st.markdown(f"📧 {tenant.email or 'N/A'} · 📞 {tenant.phone or 'N/A'}")
            statement = service.tenant_statement(tenant.id)
            st.markdown(
                f"**Billed:** {format_inr(statement.total_billed)} · "
                f"**Paid:** {format_inr(statement.total_paid)} · "
                f"**Balance:** {format_inr(statement.balance)}"
            )
            col1, col2 = st.columns(2)
            with col1:
                new_status = (
                    TenantStatus.FORMER if tenant.is_active else TenantStatus.ACTIVE
                )
                if st.button(f"Mark {new_status.value}", key=f"ts_{tenant.id}"):
                    service.save_tenant(tenant.model_copy(update={"status": new_status}))
                    st.rerun()
            with col2:
                if st.button("🗑️ Delete", key=f"td_{tenant.id}"):
                    service.delete_tenant(tenant.id)
                    st.rerun()


def render_properties_page(service: PortfolioService):
    st.title("🏢 Properties")

    with st.expander("➕ Add property"):
        with st.form("new_property", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                name = st.text_input("Name *", placeholder="A-101")
                kind = st.selectbox("Type", list(PropertyType), format_func=lambda t: t.value)
            with col2:
                unit_number = st.text_input("Unit number")
                address = st.text_area("Address")
            if st.form_submit_button("Save property", type="primary"):
                if not name.strip():
                    st.error("Please enter the property name")
                else:
                    service.save_property(Property(
                        name=name, type=kind, unit_number=unit_number, address=address
                    ))
                    st.success("✅ Property saved")

    uploaded = st.file_uploader("📥 Import properties from CSV", type=["csv"], key="property_csv")
    if uploaded and st.button("Import properties"):
        result = service.import_properties_csv(uploaded.getvalue().decode("utf-8-sig"))
        st.success(result.message)

    st.markdown("---")
    occupied = {t.property_id for t in service.list_tenants() if t.is_active}
    for prop in service.list_properties():
        col1, col2 = st.columns([4, 1])
        col1.markdown(
            f"**{prop.display_name}** · {prop.unit_number or '-'} · "
            f"{'Occupied' if prop.id in occupied else 'Vacant'}"
        )
        if col2.button("🗑️ Delete", key=f"pd_{prop.id}"):
            try:
                service.delete_property(prop.id)
                st.rerun()
            except PropertyInUseError as e:
                st.error(str(e))


def render_expenses_page(service: PortfolioService):
    st.title("💸 Expenses")
    labels = _property_label(service)

    with st.form("new_expense", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            amount = st.number_input("Amount (₹)", min_value=0.0, step=100.0)
            spent_on = st.date_input("Date", value=date.today())
        with col2:
            category = st.selectbox("Category", list(ExpenseCategory), format_func=lambda c: c.value)
            property_id = st.selectbox(
                "Property", [""] + list(labels), format_func=lambda pid: labels.get(pid, "General")
            )
        with col3:
            description = st.text_area("Description")
        if st.form_submit_button("Add expense", type="primary"):
            if amount <= 0:
                st.error("Please enter a valid amount")
            else:
                service.save_expense(Expense(
                    amount=Decimal(str(amount)),
                    spent_on=spent_on,
                    category=category,
                    property_id=property_id,
                    description=description,
                ))
                st.success("✅ Expense added")

    st.markdown("---")
    for expense in service.list_expenses():
        col1, col2 = st.columns([4, 1])
        col1.markdown(
            f"{format_date(expense.spent_on)} · **{format_inr(expense.amount)}** · "
            f"{expense.category.value} · {labels.get(expense.property_id, 'General')} · "
            f"{expense.description}"
        )
        if col2.button("🗑️ Delete", key=f"ed_{expense.id}"):
            service.delete_expense(expense.id)
            st.rerun()


def render_reports_page(service: PortfolioService):
    st.title("📑 Reports")
    names = ["tenants", "properties", "invoices", "expenses", "ledger"]
    name = st.selectbox("Report", names, format_func=str.title)

    tenant_id = None
    if name == "ledger":
        tenants = service.list_tenants()
        if not tenants:
            st.info("Add a tenant first.")
            return
        tenant_id = st.selectbox(
            "Tenant", [t.id for t in tenants],
            format_func=lambda tid: next(t.name for t in tenants if t.id == tid),
        )

    table = service.report(name, tenant_id)
    st.dataframe([dict(zip(table.header, row)) for row in table.rows], use_container_width=True)

    export_format = st.radio("Export as", ["CSV", "PDF"], horizontal=True)
    if st.button("Prepare export"):
        if export_format == "CSV":
            filename, data = service.export_report_csv(name, tenant_id)
            mime = "text/csv"
        else:
            filename, data = service.export_report_pdf(name, tenant_id)
            mime = "application/pdf"
        st.download_button(f"⬇️ Download {filename}", data=data, file_name=filename, mime=mime)


def render_settings_page(service: PortfolioService):
    """Render the settings page."""
    st.title("⚙️ Settings")
    company = service.get_company()
    style = company.invoice_settings

    with st.form("company"):
        st.markdown("### Company profile")
        name = st.text_input("Company name", value=company.name)
        address = st.text_area("Address", value=company.address)
        email = st.text_input("Email", value=company.email)

        st.markdown("### Invoice appearance")
        col1, col2 = st.columns(2)
        with col1:
            color = st.color_picker("Primary colour", value=style.primary_color)
            font = st.selectbox(
                "Font", list(FontFamily), index=list(FontFamily).index(style.font_family),
                format_func=lambda f: f.value.title(),
            )
            layout = st.selectbox(
                "Header layout", list(HeaderLayout), index=list(HeaderLayout).index(style.header_layout),
                format_func=lambda h: h.value.title(),
            )
        with col2:
            show_bank = st.checkbox("Show bank details", value=style.show_bank_details)
            show_contact = st.checkbox("Show tenant contact", value=style.show_tenant_contact)

        if st.form_submit_button("Save settings", type="primary"):
            try:
                service.update_company(
                    name=name,
                    address=address,
                    email=email,
                    invoice_settings=InvoiceSettings(
                        primary_color=color,
                        font_family=font,
                        header_layout=layout,
                        show_bank_details=show_bank,
                        show_tenant_contact=show_contact,
                    ),
                )
                st.success("✅ Settings saved")
            except ValidationError as e:
                st.error(str(e))

    st.markdown("---")
    st.markdown("### Backup")
    backup = service.export_backup()
    st.download_button(
        "⬇️ Download backup",
        data=backup.model_dump_json(indent=2),
        file_name=f"rentbook_backup_{date.today().isoformat()}.json",
        mime="application/json",
    )
    uploaded = st.file_uploader("Restore from backup", type=["json"])
    if uploaded and st.button("Restore"):
        try:
            snapshot = service.restore_backup(uploaded.getvalue())
            st.success(f"✅ Restored {snapshot.counts()}")
        except (ValidationError, ValueError) as e:
            st.error(f"That backup file could not be read: {e}")

    st.markdown("---")
    st.markdown("### Connection Status")
    status = validate_all_settings()
    for key in ("app", "google_sheets"):
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {key.replace('_', ' ').title()} - OK")
        else:
            st.error(f"❌ {key.replace('_', ' ').title()} - {status.get(f'{key}_error')}")

    st.markdown("""
    <div class="danger-box">
        <h4>Danger zone</h4>
        <p>Factory Reset will wipe all tenant, property, invoice and expense history.</p>
    </div>
    """, unsafe_allow_html=True)
    confirm = st.checkbox("I understand this cannot be undone")
    if st.button("Factory Reset System", disabled=not confirm):
        service.factory_reset()
        st.rerun()


if __name__ == "__main__":
    main()
