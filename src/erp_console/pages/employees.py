"""
Employees page: staff list, add and remove.

Technicians added here become assignable on the service tasks page.
"""

from dash import Input, Output, State, dcc, html, no_update

from erp_console.billing import ValidationError
from erp_console.components.cards import build_alert, build_empty_state
from erp_console.components.tables import build_grid, column
from erp_console.forms import DEFAULT_ROLE, EMPLOYEE_ROLES, employee_payload
from erp_console.lib.clients import ApiError
from erp_console.pages.common import api_failure, service

_COLUMNS = [column("name", "Name"), column("role", "Role"), column("phone", "Phone")]


def layout() -> html.Div:
    return html.Div(
        className="page employees-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Employee Management")]),
            dcc.Store(id="employees-refresh", data=0),
            html.Div(
                className="two-column",
                children=[
                    html.Div(
                        className="card",
                        children=[
                            html.H3("Add Staff"),
                            dcc.Input(id="employee-name", type="text", placeholder="Name"),
                            dcc.Input(id="employee-phone", type="tel", placeholder="Phone"),
                            dcc.Dropdown(
                                id="employee-role",
                                options=[{"label": role, "value": role} for role in EMPLOYEE_ROLES],
                                value=DEFAULT_ROLE,
                                clearable=False,
                            ),
                            html.Button("Save Employee", id="employee-save", className="btn btn-primary", n_clicks=0),
                            html.Div(id="employee-form-feedback"),
                        ],
                    ),
                    html.Div(
                        className="card",
                        children=[
                            html.H3("Staff"),
                            html.Div(id="employees-table"),
                            dcc.Dropdown(id="employee-select", placeholder="Select an employee"),
                            dcc.ConfirmDialogProvider(
                                html.Button("Remove", className="btn btn-danger"),
                                id="employee-delete",
                                message="Remove this employee?",
                            ),
                            html.Div(id="employee-action-feedback"),
                        ],
                    ),
                ],
            ),
        ],
    )


def register_callbacks(app) -> None:
    @app.callback(
        Output("employees-table", "children"),
        Output("employee-select", "options"),
        Input("employees-refresh", "data"),
    )
    def update_employees(_refresh):
        try:
            employees = service().list_employees()
        except ApiError as exc:
            return api_failure(exc, "Loading employees"), []
        if not employees:
            return build_empty_state("No employees yet", "Add staff with the form."), []
        rows = [{"name": e.name, "role": e.role, "phone": e.phone} for e in employees]
        options = [{"label": f"{e.name} ({e.role or 'Staff'})", "value": e.id} for e in employees]
        return build_grid("employees-grid", _COLUMNS, rows), options

    @app.callback(
        Output("employee-form-feedback", "children"),
        Output("employees-refresh", "data"),
        Output("employee-name", "value"),
        Output("employee-phone", "value"),
        Input("employee-save", "n_clicks"),
        State("employee-name", "value"),
        State("employee-phone", "value"),
        State("employee-role", "value"),
        State("employees-refresh", "data"),
        prevent_initial_call=True,
    )
    def create_employee(_n_clicks, name, phone, role, refresh):
        try:
            payload = employee_payload(name, phone, role)
            service().create_employee(payload)
        except ValidationError as exc:
            return build_alert(str(exc), "warning"), no_update, no_update, no_update
        except ApiError as exc:
            return api_failure(exc, "Saving employee"), no_update, no_update, no_update
        return build_alert(f"{payload['name']} added.", "success"), (refresh or 0) + 1, "", ""

    @app.callback(
        Output("employee-action-feedback", "children"),
        Output("employees-refresh", "data", allow_duplicate=True),
        Input("employee-delete", "submit_n_clicks"),
        State("employee-select", "value"),
        State("employees-refresh", "data"),
        prevent_initial_call=True,
    )
    def delete_employee(_submitted, employee_id, refresh):
        if not employee_id:
            return build_alert("Select an employee.", "warning"), no_update
        try:
            service().delete_employee(employee_id)
        except ApiError as exc:
            return api_failure(exc, "Remove"), no_update
        return build_alert("Employee removed.", "success"), (refresh or 0) + 1
