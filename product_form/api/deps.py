# product_form/api/deps.py
from product_form.controller import FormController

# one form per running application
controller = FormController()


def get_controller() -> FormController:
    """
    Dependency that returns the shared form controller.
    Usage:
        form = Depends(get_controller)
    """
    return controller
