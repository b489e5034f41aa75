"""
PDF Operator Constants

Content stream operators emitted by the page builder or rewritten by the
page merger. Organized by functional category according to PDF specification.

Reference: PDF 32000-1:2008 specification, Appendix A
"""

# ==============================================================================
# Graphics State Operators (PDF spec 8.4.4)
# ==============================================================================
OP_SAVE_STATE = b'q'                 # Save graphics state
OP_RESTORE_STATE = b'Q'              # Restore graphics state
OP_CTM = b'cm'                       # Modify current transformation matrix
OP_SET_LINE_WIDTH = b'w'             # Set line width

# ==============================================================================
# Color Operators (PDF spec 8.6.8)
# ==============================================================================
OP_SET_RGB_COLOR_STROKE = b'RG'      # Set RGB color for stroking
OP_SET_RGB_COLOR_FILL = b'rg'        # Set RGB color for non-stroking

# ==============================================================================
# Text Operators (PDF spec 9.3, 9.4)
# ==============================================================================
OP_BEGIN_TEXT = b'BT'            # Begin text object
OP_END_TEXT = b'ET'              # End text object
OP_SET_FONT = b'Tf'              # Set text font and size
OP_MOVE_TEXT = b'Td'             # Move to start of next text line
OP_SHOW_TEXT = b'Tj'             # Show text string

# ==============================================================================
# Path Construction and Painting Operators (PDF spec 8.5.2, 8.5.3)
# ==============================================================================
OP_MOVE_TO = b'm'                # Begin new subpath
OP_LINE_TO = b'l'                # Append straight line segment
OP_RECTANGLE = b're'             # Append rectangle as complete subpath
OP_STROKE = b'S'                 # Stroke path
OP_FILL_STROKE_EVEN_ODD = b'B*'  # Fill (even-odd rule) and stroke path

# ==============================================================================
# XObject Operators (PDF spec 8.8)
# ==============================================================================
OP_DO = b'Do'                    # Paint XObject (image or form)
OP_INLINE_IMAGE = b'INLINE IMAGE'  # pikepdf's operator for BI ... ID ... EI
