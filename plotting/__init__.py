from .preview import checkerboard, flatten_on_checkerboard, render_contact_sheet
