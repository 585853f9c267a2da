"""
Streamlit Frontend for ExpenseFlow

This is the user interface for recording and reviewing expenses.

DESIGN PRINCIPLES:
1. Three views: Dashboard, Add/Edit Expense, All Expenses
2. Every change goes through the tracker, never straight to storage
3. Failures are shown as alerts, nothing crashes the page
4. Deleting needs a second click to confirm

Run with:
    streamlit run app/main.py
"""

from datetime import date

import pandas as pd
import streamlit as st
from pydantic import ValidationError

from expenseflow.config import get_settings, validate_all_settings
from expenseflow.models import (
    DateRange,
    ExpenseCategory,
    ExpenseFilters,
    ExpenseFormData,
)
from expenseflow.tracker import ExpenseTracker, create_app_components
from expenseflow.utils import (
    expense_row_html,
    format_currency,
    format_long_date,
    format_short_date,
)


VIEWS = ["📊 Dashboard", "➕ Add Expense", "📋 All Expenses"]

CATEGORY_ICONS = {
    ExpenseCategory.FOOD: "🍽️",
    ExpenseCategory.TRANSPORTATION: "🚗",
    ExpenseCategory.ENTERTAINMENT: "🎬",
    ExpenseCategory.UTILITIES: "💡",
    ExpenseCategory.HEALTHCARE: "🏥",
    ExpenseCategory.OTHER: "📦",
}


# Page configuration
st.set_page_config(
    page_title="ExpenseFlow",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .expense-row {
        padding: 12px 16px;
        border-radius: 10px;
        border-left: 5px solid #6366f1;
        background-color: #f8fafc;
        margin: 6px 0;
    }
    .empty-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


def show_alert(message: str) -> None:
    """Blocking-alert stand-in: a visible error box on the current run."""
    st.error(message)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components(alert=show_alert)


def money(amount, decimals: int = 2) -> str:
    return format_currency(
        amount,
        decimals=decimals,
        symbol=get_settings().app.currency_symbol,
    )


def category_label(category: ExpenseCategory) -> str:
    return f"{CATEGORY_ICONS[category]} {category.value}"


def start_edit(expense_id: str) -> None:
    st.session_state.editing_id = expense_id
    st.session_state.form_errors = {}
    st.session_state.view = VIEWS[1]


def cancel_edit() -> None:
    st.session_state.editing_id = None
    st.session_state.form_errors = {}
    st.session_state.view = VIEWS[2]


def main():
    """Main application entry point."""
    tracker, _ = get_components()

    # Pick up changes written by another session or process
    tracker.poll_storage()

    if "view" not in st.session_state:
        st.session_state.view = VIEWS[0]
    if "editing_id" not in st.session_state:
        st.session_state.editing_id = None
    if "delete_confirm" not in st.session_state:
        st.session_state.delete_confirm = None
    if "form_version" not in st.session_state:
        st.session_state.form_version = 0

    # The radio's state can only be set before the widget is drawn
    pending_view = st.session_state.pop("pending_view", None)
    if pending_view:
        st.session_state.view = pending_view

    st.sidebar.title("💸 ExpenseFlow")
    st.sidebar.markdown("---")

    view = st.sidebar.radio("Navigate to:", VIEWS, key="view")
    if view != VIEWS[1]:
        st.session_state.editing_id = None

    st.sidebar.markdown("---")
    render_data_tools(tracker)

    flash_error = st.session_state.pop("flash_error", None)
    if flash_error:
        show_alert(flash_error)
    flash = st.session_state.pop("flash", None)
    if flash:
        st.success(flash)

    if view == VIEWS[0]:
        render_dashboard_page(tracker)
    elif view == VIEWS[1]:
        render_form_page(tracker)
    else:
        render_list_page(tracker)


def render_data_tools(tracker: ExpenseTracker):
    """Sidebar: CSV export/import, JSON backup, clear all."""
    st.sidebar.markdown("### 📁 Data")

    if tracker.expenses:
        st.sidebar.download_button(
            "⬇️ Export CSV",
            data=tracker.export_csv(),
            file_name=tracker.export_filename(),
            mime="text/csv",
            help="Exports the expenses currently shown (filters apply)",
        )
    else:
        st.sidebar.caption("No expenses to export")

    uploaded = st.sidebar.file_uploader(
        "Import CSV",
        type=["csv"],
        help="Columns: Date, Amount, Category, Description",
    )
    if uploaded and st.sidebar.button("⬆️ Import"):
        if uploaded.size > get_settings().app.max_import_size_bytes:
            show_alert("File is too large to import.")
        else:
            text = uploaded.getvalue().decode("utf-8", errors="replace")
            result = tracker.import_csv(text)
            if result is not None:
                st.sidebar.success(
                    f"Successfully imported {result.imported_count} expenses"
                    + (f" ({result.skipped_count} rows skipped)" if result.skipped_count else "")
                )

    with st.sidebar.expander("🗄️ Backup"):
        st.download_button(
            "Download JSON backup",
            data=tracker.export_json(),
            file_name=f"expenses_backup_{date.today().isoformat()}.json",
            mime="application/json",
        )
        backup = st.file_uploader("Restore backup", type=["json"], key="backup")
        if backup and st.button("Restore (replaces all)"):
            if tracker.import_json(backup.getvalue().decode("utf-8", errors="replace")):
                st.success(f"Restored {tracker.total_count} expenses")

        if st.checkbox("I understand this deletes everything"):
            if st.button("🗑️ Clear all expenses"):
                if tracker.clear_all():
                    st.success("All expenses deleted")
                else:
                    show_alert("Could not clear expenses.")


def render_dashboard_page(tracker: ExpenseTracker):
    """Render the dashboard."""
    st.title("📊 Dashboard")
    stats = tracker.dashboard_stats

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric(
            "Total Expenses",
            money(stats.total_expenses, 0),
            help=f"All time total in {get_settings().app.currency_code}",
        )
    with col2:
        st.metric("This Month", money(stats.monthly_total, 0), help="Current month spending")
    with col3:
        if stats.highest_category:
            st.metric(
                "Top Category",
                stats.highest_category.category.value,
                help=money(stats.highest_category.amount, 0),
            )
        else:
            st.metric("Top Category", "N/A")
    with col4:
        st.metric(
            "Total Items",
            sum(item.count for item in stats.category_breakdown),
            help="Number of recorded expenses",
        )

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Category Breakdown")
        if stats.category_breakdown:
            chart_data = pd.DataFrame(
                {
                    "Category": [item.category.value for item in stats.category_breakdown],
                    "Amount": [float(item.total) for item in stats.category_breakdown],
                }
            )
            st.bar_chart(chart_data, x="Category", y="Amount")
        else:
            st.info("No data to display")

    with col2:
        st.subheader("Category Distribution")
        if stats.category_breakdown:
            grand_total = stats.total_expenses or 1
            for item in stats.category_breakdown:
                share = float(item.total / grand_total)
                st.markdown(
                    f"{category_label(item.category)} · {money(item.total)} "
                    f"({item.count} {'item' if item.count == 1 else 'items'})"
                )
                st.progress(min(max(share, 0.0), 1.0))
        else:
            st.info("No data to display")

    st.markdown("---")
    st.subheader("Recent Expenses")
    if stats.recent_expenses:
        for expense in stats.recent_expenses:
            st.markdown(
                expense_row_html(
                    expense.description,
                    money(expense.amount),
                    f"{category_label(expense.category)} · {format_long_date(expense.date)}",
                ),
                unsafe_allow_html=True,
            )
    else:
        st.markdown("""
        <div class="empty-box">
            <p>No expenses yet. Use <strong>Add Expense</strong> to record your first one.</p>
        </div>
        """, unsafe_allow_html=True)


def render_form_page(tracker: ExpenseTracker):
    """Render the add/edit form."""
    editing = None
    if st.session_state.editing_id:
        editing = tracker.get_expense(st.session_state.editing_id)

    if editing:
        st.title("✏️ Edit Expense")
        initial = ExpenseFormData.from_expense(editing)
    else:
        st.title("➕ Add Expense")
        initial = ExpenseFormData(date=date.today().isoformat())

    categories = list(ExpenseCategory)
    errors = st.session_state.get("form_errors", {})
    if errors:
        st.warning(st.session_state.get("form_summary", ""))

    # A new form key after each save resets the inputs
    form_key = f"expense_form_{editing.id if editing else 'new'}_{st.session_state.form_version}"

    with st.form(form_key):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.text_input("Amount *", value=initial.amount, placeholder="0.00")
            if "amount" in errors:
                st.caption(f"❌ {errors['amount']}")

            category = st.selectbox(
                "Category *",
                options=categories,
                index=categories.index(ExpenseCategory(initial.category)),
                format_func=category_label,
            )
        with col2:
            expense_date = st.date_input(
                "Date *",
                value=date.fromisoformat(initial.date),
            )
            if "date" in errors:
                st.caption(f"❌ {errors['date']}")

        description = st.text_area(
            "Description *",
            value=initial.description,
            placeholder="What did you spend on?",
        )
        if "description" in errors:
            st.caption(f"❌ {errors['description']}")

        submitted = st.form_submit_button(
            "💾 Update Expense" if editing else "💾 Add Expense",
            type="primary",
        )

    if editing:
        st.button("✖️ Cancel", on_click=cancel_edit)

    if not submitted:
        return

    form = ExpenseFormData(
        amount=amount,
        category=category.value,
        description=description,
        date=expense_date.isoformat() if expense_date else "",
    )

    if editing:
        saved, result = tracker.update_from_form(editing.id, form)
    else:
        expense, result = tracker.add_from_form(form)
        saved = expense is not None

    st.session_state.form_errors = result.errors
    st.session_state.form_summary = tracker.validator.get_user_friendly_summary(result)
    if not result.is_valid:
        st.rerun()

    if not saved:
        show_alert("Could not save the expense.")
        return

    st.session_state.form_errors = {}
    st.session_state.form_version += 1
    if editing:
        st.session_state.editing_id = None
        st.session_state.pending_view = VIEWS[2]
        st.session_state.flash = "Expense updated"
    else:
        st.session_state.flash = "Expense added"
    st.rerun()


def render_list_page(tracker: ExpenseTracker):
    """Render the filtered expense list."""
    st.title("📋 All Expenses")
    st.markdown("Manage and organize your spending history")

    with st.expander("🔎 Filters", expanded=not tracker.filters.is_empty):
        col1, col2 = st.columns(2)
        with col1:
            category = st.selectbox(
                "Category",
                options=[None] + list(ExpenseCategory),
                format_func=lambda x: "All Categories" if x is None else category_label(x),
            )
            search = st.text_input("Search", placeholder="Description or category")
        with col2:
            start_date = st.date_input("From", value=None)
            end_date = st.date_input("To", value=None)

        try:
            date_range = None
            if start_date or end_date:
                date_range = DateRange(start_date=start_date, end_date=end_date)
            tracker.set_filters(ExpenseFilters(
                category=category,
                date_range=date_range,
                search_term=search or None,
            ))
        except ValidationError:
            show_alert("The end date cannot be before the start date.")

    expenses = tracker.expenses
    count = len(expenses)
    st.caption(
        f"{count} {'expense' if count == 1 else 'expenses'} • "
        f"Total: {money(tracker.total_amount)} {get_settings().app.currency_code}"
    )

    if not expenses:
        st.markdown("""
        <div class="empty-box">
            <p>No expenses match. Adjust the filters or add a new expense.</p>
        </div>
        """, unsafe_allow_html=True)
        return

    for index, expense in enumerate(sorted(expenses, key=lambda e: e.date, reverse=True)):
        col1, col2, col3, col4 = st.columns([5, 2, 1, 1])
        with col1:
            st.markdown(
                f"**{expense.description}**  \n"
                f"{category_label(expense.category)} · {format_short_date(expense.date)}"
            )
        with col2:
            st.markdown(f"**{money(expense.amount)}**")
        with col3:
            st.button("✏️", key=f"edit_{index}_{expense.id}", on_click=start_edit, args=(expense.id,))
        with col4:
            confirming = st.session_state.delete_confirm == expense.id
            if st.button("✅" if confirming else "🗑️", key=f"delete_{index}_{expense.id}"):
                if confirming:
                    if not tracker.delete_expense(expense.id):
                        st.session_state.flash_error = "Could not delete the expense."
                    st.session_state.delete_confirm = None
                else:
                    st.session_state.delete_confirm = expense.id
                st.rerun()


def render_settings_status():
    """Show configuration problems, if any."""
    status = validate_all_settings()
    for key in ("storage", "app"):
        if not status.get(key, False):
            st.sidebar.error(f"⚠️ {key} settings: {status.get(f'{key}_error')}")


if __name__ == "__main__":
    render_settings_status()
    main()
