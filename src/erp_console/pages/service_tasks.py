"""
Service tasks page: schedule, edit, complete and delete technician visits.

Choosing a task in the editor loads it into the form; with no task chosen
the form creates a new one. A task keeps its customer once created, as the
API only lets the technician, date, type and notes change.
"""

from dash import Input, Output, State, ctx, dcc, html, no_update

from erp_console import aggregators
from erp_console.billing import ValidationError
from erp_console.components.cards import build_alert, build_empty_state
from erp_console.components.tables import build_grid, column
from erp_console.forms import DEFAULT_TASK_TYPE, TASK_TYPES, task_payload
from erp_console.lib.clients import ApiError
from erp_console.models.records import ServiceTask
from erp_console.pages.common import api_failure, service

VIEWS = [
    {"label": "Active", "value": "active"},
    {"label": "History", "value": "history"},
    {"label": "All", "value": "all"},
]

_COLUMNS = [
    column("date", "Date"),
    column("customer", "Customer"),
    column("technician", "Technician"),
    column("task_type", "Type"),
    column("status", "Status"),
    column("notes", "Notes"),
]


def layout() -> html.Div:
    return html.Div(
        className="page tasks-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Service Tasks")]),
            dcc.Store(id="tasks-refresh", data=0),
            dcc.Store(id="tasks-forms", data={}),
            html.Div(
                className="card",
                children=[
                    dcc.RadioItems(id="tasks-view", options=VIEWS, value="active", inline=True),
                    html.Div(id="tasks-table"),
                ],
            ),
            html.Div(
                className="card task-editor",
                children=[
                    html.H3("Task"),
                    dcc.Dropdown(id="task-edit-select", placeholder="New task (or pick one to edit)"),
                    dcc.Dropdown(id="task-customer", placeholder="Customer"),
                    dcc.Dropdown(id="task-technician", placeholder="Unassigned"),
                    dcc.Dropdown(
                        id="task-type",
                        options=[{"label": t, "value": t} for t in TASK_TYPES],
                        value=DEFAULT_TASK_TYPE,
                        clearable=False,
                    ),
                    dcc.DatePickerSingle(id="task-date", display_format="DD/MM/YYYY"),
                    dcc.Textarea(id="task-notes", placeholder="Notes", rows=2),
                    html.Div(
                        className="button-row",
                        children=[
                            html.Button("Save Task", id="task-save", className="btn btn-primary", n_clicks=0),
                            html.Button("Mark Completed", id="task-mark-done", className="btn btn-outline", n_clicks=0),
                            dcc.ConfirmDialogProvider(
                                html.Button("Delete", className="btn btn-danger"),
                                id="task-delete",
                                message="Delete this task?",
                            ),
                        ],
                    ),
                    html.Div(id="task-editor-feedback"),
                ],
            ),
        ],
    )


def task_rows(tasks: list[ServiceTask]) -> list[dict]:
    ordered = sorted(tasks, key=lambda t: t.service_date, reverse=True)
    return [
        {
            "date": t.service_date,
            "customer": t.customer_name,
            "technician": t.technician,
            "task_type": t.task_type,
            "status": t.status or "Pending",
            "notes": t.notes,
        }
        for t in ordered
    ]


def task_form(task: ServiceTask | None) -> tuple:
    """Return customer, technician, type, date and notes values for the editor."""
    if task is None:
        return None, None, DEFAULT_TASK_TYPE, None, ""
    return task.customer_id or None, task.employee_id or None, task.task_type, task.service_date or None, task.notes


def register_callbacks(app) -> None:
    @app.callback(
        Output("tasks-table", "children"),
        Output("task-edit-select", "options"),
        Output("task-customer", "options"),
        Output("task-technician", "options"),
        Output("tasks-forms", "data"),
        Input("tasks-view", "value"),
        Input("tasks-refresh", "data"),
    )
    def update_tasks(view, _refresh):
        erp = service()
        try:
            tasks = list(erp.list_services())
            customers = erp.list_customers()
            employees = erp.list_employees()
        except ApiError as exc:
            return api_failure(exc, "Loading tasks"), [], [], [], {}
        shown = aggregators.tasks_in_view(tasks, view or "active")
        table = (
            build_grid("tasks-grid", _COLUMNS, task_rows(shown), page_size=15)
            if shown
            else build_empty_state("No tasks", "Nothing in this view.")
        )
        task_options = [
            {"label": f"{t.service_date} - {t.customer_name} ({t.task_type})", "value": t.id}
            for t in tasks
            if not t.is_completed
        ]
        return (
            table,
            task_options,
            [{"label": c.name, "value": c.id} for c in customers],
            [{"label": e.name, "value": e.id} for e in employees],
            {t.id: list(task_form(t)) for t in tasks if not t.is_completed},
        )

    @app.callback(
        Output("task-customer", "value"),
        Output("task-technician", "value"),
        Output("task-type", "value"),
        Output("task-date", "date"),
        Output("task-notes", "value"),
        Output("task-customer", "disabled"),
        Input("task-edit-select", "value"),
        State("tasks-forms", "data"),
        prevent_initial_call=True,
    )
    def load_task(task_id, forms):
        """Fill the editor from the chosen task, or clear it for a new one."""
        values = (forms or {}).get(task_id) if task_id else None
        if not values:
            return (*task_form(None), False)
        return (*values, True)

    @app.callback(
        Output("task-editor-feedback", "children"),
        Output("tasks-refresh", "data"),
        Output("task-edit-select", "value"),
        Input("task-save", "n_clicks"),
        State("task-edit-select", "value"),
        State("task-customer", "value"),
        State("task-technician", "value"),
        State("task-type", "value"),
        State("task-date", "date"),
        State("task-notes", "value"),
        State("tasks-refresh", "data"),
        prevent_initial_call=True,
    )
    def save_task(_n_clicks, task_id, customer_id, employee_id, task_type, service_date, notes, refresh):
        """Assign a new task, or update the one being edited."""
        try:
            payload = task_payload(customer_id, employee_id, service_date, task_type, notes)
            if task_id:
                service().update_service(task_id, payload)
            else:
                service().assign_service(payload)
        except ValidationError as exc:
            return build_alert(str(exc), "warning"), no_update, no_update
        except ApiError as exc:
            return api_failure(exc, "Saving task"), no_update, no_update
        message = "Task updated." if task_id else "Task created."
        return build_alert(message, "success"), (refresh or 0) + 1, None

    @app.callback(
        Output("task-editor-feedback", "children", allow_duplicate=True),
        Output("tasks-refresh", "data", allow_duplicate=True),
        Output("task-edit-select", "value", allow_duplicate=True),
        Input("task-mark-done", "n_clicks"),
        Input("task-delete", "submit_n_clicks"),
        State("task-edit-select", "value"),
        State("tasks-refresh", "data"),
        prevent_initial_call=True,
    )
    def close_task(_done, _deleted, task_id, refresh):
        """Complete or delete the task in the editor."""
        if not task_id:
            return build_alert("Pick a task first.", "warning"), no_update, no_update
        completing = ctx.triggered_id == "task-mark-done"
        try:
            if completing:
                service().complete_service(task_id)
            else:
                service().delete_service(task_id)
        except ApiError as exc:
            return api_failure(exc, "Task update"), no_update, no_update
        message = "Task marked completed." if completing else "Task deleted."
        return build_alert(message, "success"), (refresh or 0) + 1, None
