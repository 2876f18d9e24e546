"""Admin page: manage the variety catalog."""
import logging
from dataclasses import replace

import pandas as pd
import streamlit as st

from core import services
from core.constants import CATEGORIES
from core.errors import CheckoutError, StaleStock
from core.exports import catalog_frame, import_catalog, parse_catalog_upload, to_excel_bytes
from core.models import Variety
from core.stock import set_stock
from ui.components import category_filter, filter_varieties, render_varieties_table
from ui.data import bump_cache_version, flash, get_varieties

logger = logging.getLogger(__name__)

ADD_NEW = "➕ New variety"


def _selected_variety(df, choice):
    if choice == ADD_NEW or df.empty:
        return None
    match = df[df["id"] == choice]
    if match.empty:
        return None
    row = match.iloc[0]
    return Variety(
        id=int(row["id"]),
        name=row["name"],
        category=row["category"],
        stock=int(row["stock"]),
        cost=float(row["cost"]),
        selling_price=float(row["selling_price"]),
    )


def _save(conn, variety: Variety, editing) -> None:
    """Add ``variety``, or update ``editing`` with the form values.

    The stock field is written against the stock shown in the form, so a
    sale made while the form was open is never overwritten.
    """
    try:
        if editing is None:
            services.add_variety(conn, variety)
        else:
            services.update_variety(conn, variety)
            set_stock(conn, replace(editing, name=variety.name), variety.stock, "admin")
    except services.integrity_error(conn):
        st.toast(f"❌ Variety '{variety.name}' already exists.", icon="⚠️")
        return
    except StaleStock:
        bump_cache_version("varieties")
        current = services.get_variety(conn, editing.id).stock
        flash(
            f"Details saved, but stock changed to {current} while editing; stock not updated",
            icon="⚠️",
        )
        st.rerun()
    except (CheckoutError, ValueError) as e:
        st.toast(f"❌ Could not save variety: {e}", icon="⚠️")
        return
    except Exception as e:
        logger.exception("Failed to save variety %s", variety.name)
        st.error(f"Could not save variety: {e}")
        return
    bump_cache_version("varieties")
    flash(f"Variety '{variety.name}' {'updated' if editing else 'added'}")
    st.session_state["reset_admin_choice"] = True
    st.rerun()


def _render_form(conn, df):
    if st.session_state.pop("reset_admin_choice", False):
        st.session_state.pop("admin_choice", None)

    names = {int(r.id): f"{r.name} ({r.category})" for r in df.itertuples(index=False)}
    options = [ADD_NEW] + sorted(names, key=lambda i: names[i].casefold())
    choice = st.selectbox(
        "Variety",
        options,
        format_func=lambda o: o if o == ADD_NEW else names.get(o, str(o)),
        key="admin_choice",
    )
    editing = _selected_variety(df, choice)

    with st.form(f"variety_form_{choice}"):
        name = st.text_input("Name *", value=editing.name if editing else "")
        category = st.selectbox(
            "Category *",
            CATEGORIES,
            index=CATEGORIES.index(editing.category) if editing else 0,
        )
        col1, col2, col3 = st.columns(3)
        stock = col1.number_input("Stock", min_value=0, step=1, value=editing.stock if editing else 0)
        cost = col2.number_input("Cost", min_value=0.0, value=editing.cost if editing else 0.0)
        price = col3.number_input(
            "Selling Price", min_value=0.0, value=editing.selling_price if editing else 0.0
        )
        submitted = st.form_submit_button("\U0001F4BE Update" if editing else "✅ Add Variety")

    if submitted:
        if not name.strip():
            st.error("Name is required.")
        else:
            _save(
                conn,
                Variety(
                    id=editing.id if editing else None,
                    name=name.strip(),
                    category=category,
                    stock=int(stock),
                    cost=float(cost),
                    selling_price=float(price),
                ),
                editing,
            )

    if editing is not None:
        confirm = st.checkbox(f"Confirm delete of {editing.name}", key=f"confirm_del_{editing.id}")
        if st.button("\U0001F5D1️ Delete", disabled=not confirm):
            try:
                services.delete_variety(conn, editing.id)
            except CheckoutError as e:
                st.toast(f"❌ Could not delete: {e}", icon="⚠️")
            except Exception as e:
                logger.exception("Failed to delete variety %s", editing.name)
                st.error(f"Could not delete: {e}")
            else:
                bump_cache_version("varieties")
                flash(f"Deleted '{editing.name}'", icon="\U0001F5D1️")
                st.session_state["reset_admin_choice"] = True
                st.rerun()


def _render_import_export(conn, df):
    st.download_button(
        "Export to Excel",
        data=to_excel_bytes(catalog_frame(df)),
        file_name="icebay_varieties.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    upload = st.file_uploader(
        "Import from Excel",
        type=["xlsx", "xls"],
        help="Columns: Name, Category, Stock, Cost, Selling Price",
    )
    if upload is None:
        return
    try:
        import_df = pd.read_excel(upload)
    except Exception as e:
        st.error(f"Failed to read file: {e}")
        return

    varieties, errors = parse_catalog_upload(import_df)
    for err in errors:
        st.warning(err)
    if not varieties:
        st.info("Nothing to import")
        return
    st.caption(f"{len(varieties)} rows ready. Existing names are updated, new names are added.")
    if st.button("Import varieties"):
        result = import_catalog(conn, varieties)
        bump_cache_version("varieties")
        summary = f"{result.added} added, {result.updated} updated"
        if result.stale:
            summary += f"; stock changed during import, not overwritten: {', '.join(result.stale)}"
        if result.error:
            flash(f"Import stopped ({summary}). {result.error}", icon="⚠️")
        elif result.stale:
            flash(f"Imported: {summary}", icon="⚠️")
        else:
            flash(f"Imported: {summary}", icon="\U0001F4E5")
        st.rerun()


def render(conn):
    """Render the admin catalog page."""
    st.header("⚙️ Admin · Varieties")
    df = get_varieties(conn)

    _render_form(conn, df)

    st.divider()
    search = st.text_input("Search varieties", key="admin_search")
    category = category_filter("admin_category")
    render_varieties_table(filter_varieties(df, search, category))

    st.divider()
    st.subheader("Import / Export")
    _render_import_export(conn, df)
