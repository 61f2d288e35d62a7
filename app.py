import streamlit as st
import pandas as pd
import logging
from datetime import datetime

from aba import ABA, BatchConfig, CREDIT, DEBIT, Transaction
from aba_errors import ABAError
from aba_logging import setup_logging
from aba_settings import settings

logger = logging.getLogger(__name__)

PAYMENT_COLUMNS = [
    "bsb",
    "account",
    "transaction_code",
    "amount",
    "account_title",
    "reference",
    "trace_bsb",
    "trace_account",
    "remitter",
    "tax",
    "tax_amount",
]

# Authentication function
def check_password():
    """Returns True if the user has entered the correct password."""

    def password_entered():
        """Checks whether a password entered by the user is correct."""
        # SECURITY: Password must be set via environment variable
        correct_password = settings.app_password

        if not correct_password:
            st.error("🚨 Security Error: Password not configured. Contact administrator.")
            st.session_state["password_correct"] = False
            return

        if st.session_state["password"] == correct_password:
            st.session_state["password_correct"] = True
            del st.session_state["password"]  # Don't store password
        else:
            st.session_state["password_correct"] = False

    if "password_correct" not in st.session_state:
        # First run, show input for password
        st.text_input(
            "🔐 Enter Password",
            type="password",
            on_change=password_entered,
            key="password",
            help="Contact your administrator for the access password"
        )
        st.info("🔒 This application is password protected to secure financial data.")
        st.warning("⚠️ Password must be configured by administrator via environment variable.")
        return False
    elif not st.session_state["password_correct"]:
        # Password not correct, show input + error
        st.text_input(
            "🔐 Enter Password",
            type="password",
            on_change=password_entered,
            key="password",
            help="Contact your administrator for the access password"
        )
        st.error("😞 Password incorrect. Contact your administrator for the correct password.")
        return False
    else:
        # Password correct
        return True

def empty_payments_frame():
    """Blank payments table for the editor"""
    return pd.DataFrame(columns=PAYMENT_COLUMNS, dtype=str)

def read_payments_csv(csv_file):
    """Read uploaded payments, keeping account numbers and BSBs as text"""
    frame = pd.read_csv(csv_file, dtype=str, keep_default_na=False)
    frame.columns = [column.strip().lower() for column in frame.columns]
    missing = [column for column in PAYMENT_COLUMNS[:4] if column not in frame.columns]
    if missing:
        raise ValueError(f"CSV is missing column(s): {', '.join(missing)}")
    return frame

def transactions_from_frame(frame):
    """Convert payment rows to transactions, skipping blank rows"""
    frame = frame.replace(r"^\s*$", pd.NA, regex=True).dropna(how="all")
    return [
        Transaction.from_mapping({key: None if pd.isna(value) else value for key, value in row.items()})
        for row in frame.to_dict(orient="records")
    ]

def batch_summary(totals):
    """Display values for the file totals"""
    return {
        "Payments": str(totals.count),
        "Credit Total": f"${totals.credit / 100:,.2f}",
        "Debit Total": f"${totals.debit / 100:,.2f}",
        "Net Total": f"${totals.net / 100:,.2f}",
    }

def aba_filename(config, processing_date):
    description = (config.description or "ABA").strip().replace(" ", "_")
    return f"{description}_{processing_date.strftime('%Y%m%d')}.ABA"

def main():
    st.set_page_config(page_title="ABA File Generator", page_icon="🏦")
    setup_logging(settings.log_level)

    st.title("🏦 ABA File Generator")
    st.markdown("Generate direct entry ABA files from a batch of payments")

    # Check password first - return early if not authenticated
    if not check_password():
        st.stop()

    # Only show content after authentication
    st.success("✅ Access granted")

    with st.sidebar:
        st.header("👤 User Menu")
        if st.button("🔓 Logout"):
            for key in list(st.session_state.keys()):
                del st.session_state[key]
            st.rerun()

        st.divider()
        st.header("ℹ️ Transaction Codes")
        st.text(f"{CREDIT} - Credit")
        st.text(f"{DEBIT} - Debit")

    # User bank details input
    st.header("Your Bank Details")
    col1, col2 = st.columns(2)

    with col1:
        user_bsb = st.text_input("BSB", value=settings.bsb, help="Your bank BSB number")
        user_account = st.text_input("Account Number", value=settings.account, help="Your bank account number")
        bank = st.text_input("Bank Code", value=settings.bank, max_chars=3, help="Financial institution abbreviation, e.g. CBA")
        apca_number = st.text_input("APCA Number", value=settings.user_number, help="Your APCA User ID (6 digits)")

    with col2:
        user_name = st.text_input("Account Name", value=settings.user_name, max_chars=26, help="Your account name")
        description = st.text_input("Description", value=settings.description, max_chars=12, help="Entry description")
        processing_date = st.date_input("Processing Date", datetime.now())
        set_time = st.checkbox("Set processing time")
        processing_time = st.time_input("Processing Time") if set_time else None

    # Payments
    st.header("Payments")
    uploaded_file = st.file_uploader(
        "Upload payments CSV",
        type=["csv"],
        help=f"Columns: {', '.join(PAYMENT_COLUMNS)}"
    )

    if uploaded_file:
        try:
            payments = read_payments_csv(uploaded_file)
        except ValueError as e:
            st.error(f"Error processing {uploaded_file.name}: {str(e)}")
            payments = empty_payments_frame()
    else:
        payments = empty_payments_frame()

    payments = st.data_editor(payments, num_rows="dynamic", use_container_width=True)

    if st.button("Generate ABA File", type="primary"):
        if not (user_bsb and user_account and user_name and apca_number):
            st.error("Please fill in all your bank details including APCA number")
            return

        config = BatchConfig(
            bsb=user_bsb,
            account=user_account,
            bank=bank,
            user_name=user_name,
            user_number=apca_number,
            description=description,
            date=processing_date,
            time=processing_time,
        )
        aba = ABA(config)

        try:
            transactions = transactions_from_frame(payments)
            aba_content = aba.generate(transactions)
        except ABAError as e:
            logger.warning("ABA generation failed", extra={"error": str(e)})
            st.error(f"Error generating ABA file: {str(e)}")
            return

        totals = aba.get_footer(transactions)
        filename = aba_filename(config, processing_date)

        st.download_button(
            label="📥 Download ABA File",
            data=aba_content,
            file_name=filename,
            mime="text/plain"
        )

        st.success(f"✅ ABA file generated for {totals.count} payment(s)")

        # Show batch summary
        st.subheader("Batch Summary")
        summary_cols = st.columns(4)
        for column, (label, value) in zip(summary_cols, batch_summary(totals).items()):
            column.metric(label, value)

        # Show preview
        st.subheader("ABA File Preview")
        st.code(aba_content, language="text")

if __name__ == "__main__":
    main()
