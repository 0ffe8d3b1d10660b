from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict


def json_formdata():
    """
    Turn a JSON request body into form data

    Values are stringified so that 0 counts as provided and booleans use
    the spellings BooleanField understands.
    """
    payload = request.get_json(silent=True) or {}
    data = MultiDict()
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        data.add(key, str(value))
    return data


class JSONForm(FlaskForm):
    """Form bound to the JSON body; CSRF is enforced per request by CSRFProtect"""

    class Meta:
        csrf = False

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("formdata", json_formdata())
        super().__init__(*args, **kwargs)

    @property
    def error_messages(self):
        return {name: errors[0] for name, errors in self.errors.items() if errors}
