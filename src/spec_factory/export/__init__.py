from .html_packet import render_packet_html, export_filename

__all__ = ["render_packet_html", "export_filename"]
