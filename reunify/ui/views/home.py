"""
Home View
=========

Landing screen describing the app, with a single button into the editor.
"""

import customtkinter as ctk

FEATURES = [
    ("Upload", "Pick any two photos, one of each person."),
    ("Choose a Style", "Natural, anime, pencil sketch or Ghibli."),
    ("Share a Locket", "Add a letter and a voice message, then share the link."),
]


class HomeView(ctk.CTkFrame):
    def __init__(self, parent, controller):
        super().__init__(parent)
        self.controller = controller

        self.grid_columnconfigure(0, weight=1)

        intro = ctk.CTkLabel(
            self,
            text=(
                "Reunify uses Gemini to bridge the gap between separate photos. Upload any two "
                "images, and we will create a seamless moment of togetherness, allowing you to "
                "visualize connections that transcend time and distance."
            ),
            wraplength=760, justify="center", font=("Roboto", 16)
        )
        intro.grid(row=0, column=0, padx=40, pady=(40, 30))

        features = ctk.CTkFrame(self, fg_color="transparent")
        features.grid(row=1, column=0, pady=10)
        for col, (title, text) in enumerate(FEATURES):
            card = ctk.CTkFrame(features)
            card.grid(row=0, column=col, padx=15, sticky="n")
            ctk.CTkLabel(card, text=title, font=("Roboto", 18, "bold")).pack(padx=20, pady=(15, 5))
            ctk.CTkLabel(card, text=text, wraplength=200).pack(padx=20, pady=(0, 15))

        ctk.CTkButton(
            self, text="Begin Reunification", width=260, height=50,
            font=("Roboto", 18, "bold"), command=self.controller.start_editor
        ).grid(row=2, column=0, pady=40)
