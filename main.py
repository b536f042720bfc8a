#!/usr/bin/env python3
"""
AI Bulk Lister - Main CLI Application
=====================================
Menu-driven terminal front end for a bulk upload session: pick photos,
let the AI group and analyse them, fix the grouping, review each product
and publish everything in one go.
"""

import logging
import os
import sys

from dotenv import load_dotenv

from bulk_lister.config import PipelineConfig
from bulk_lister.schema import ProductFormData
from bulk_lister.workflow import BulkUploadWorkflow, Stage, WorkflowStateError

# Load environment variables
load_dotenv()

EDITABLE_FIELDS = ProductFormData.field_names()


def clear_screen():
    """Clear the console screen"""
    os.system('cls' if os.name == 'nt' else 'clear')


def print_header():
    print("=" * 70)
    print("🚲 AI BULK LISTER - Photos to Listings")
    print("=" * 70)
    print()


def get_input(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    value = input(f"{prompt}{suffix}: ").strip()
    return value or default


def get_int(prompt: str, default: int = 0) -> int:
    try:
        return int(get_input(prompt, str(default)))
    except ValueError:
        print("❌ Please enter a number")
        return default


def show_progress(stage: Stage, progress):
    print(f"   {progress.phase or stage.value}: {progress.current}/{progress.total} ({progress.percent:.0f}%)")


def show_error(workflow: BulkUploadWorkflow):
    if workflow.session.error:
        print(f"\n❌ {workflow.session.error}")


def print_products(workflow: BulkUploadWorkflow):
    for i, product in enumerate(workflow.products):
        marker = "✨" if workflow.session.selection.is_enhanced(product.group_id) else "  "
        selected = "[x]" if workflow.session.selection.is_selected(product.group_id) else "[ ]"
        print(f"{i}. {selected}{marker} {product.form_data.title or product.suggested_name} "
              f"({product.photo_count} photos)")
        for url in product.image_urls:
            print(f"      - {url}")


# ============================================================
# Stage screens
# ============================================================

def photos_screen(workflow: BulkUploadWorkflow):
    session = workflow.session
    print(f"📷 {len(session.photos)} photo(s) selected")
    for i, photo in enumerate(session.photos):
        cover = " (cover)" if i == 0 else ""
        print(f"   {i}. {photo.path}{cover}")
    show_error(workflow)

    print("\n1. Add photos  2. Remove photo  3. Set cover  4. Upload  0. Close")
    choice = get_input("Select an option", "4" if session.photos else "1")

    if choice == "1":
        paths = get_input("Photo paths (space separated)").split()
        added = workflow.add_photos(paths)
        print(f"✅ Added {len(added)} photo(s)")
    elif choice == "2":
        workflow.remove_photo(get_int("Photo number"))
    elif choice == "3":
        workflow.set_primary_photo(get_int("Photo number"))
    elif choice == "4":
        print("\n📤 Uploading and analysing...")
        workflow.start_upload()
    elif choice == "0":
        workflow.close()


def assigning_screen(workflow: BulkUploadWorkflow):
    print("🧩 Check the grouping\n")
    print_products(workflow)

    print("\n1. Move photo  2. Photo to new product  3. Continue")
    choice = get_input("Select an option", "3")

    if choice in ("1", "2"):
        from_index = get_int("From product")
        photo_url = get_input("Photo URL")
        if choice == "1":
            to_index = get_int("To product")
            if not workflow.move_photo(photo_url, from_index, to_index):
                print("⚠️  Nothing moved")
        elif workflow.create_product_from_photo(photo_url, from_index) is None:
            print("⚠️  Photo not found")
    elif choice == "3":
        workflow.continue_from_assigning()


def enhancing_screen(workflow: BulkUploadWorkflow):
    print("✨ Remove backgrounds (optional)\n")
    print_products(workflow)

    print("\n1. Toggle product  2. Select all  3. Clear  4. Continue  5. Skip  9. Back")
    choice = get_input("Select an option", "4")

    if choice == "1":
        index = get_int("Product number")
        if 0 <= index < len(workflow.products):
            workflow.toggle_enhancement(workflow.products[index].group_id)
    elif choice == "2":
        workflow.select_all_for_enhancement()
    elif choice == "3":
        workflow.clear_enhancement_selection()
    elif choice == "4":
        workflow.run_enhancement()
    elif choice == "5":
        workflow.skip_enhancement()
    elif choice == "9":
        workflow.back_to_assigning()


def reviewing_screen(workflow: BulkUploadWorkflow):
    session = workflow.session
    product = workflow.current_product
    print(f"📝 Product {session.current_index + 1} of {len(workflow.products)}"
          f" - {'✅ ready' if product.is_valid else '⚠️  incomplete'}\n")
    for name in EDITABLE_FIELDS:
        value = getattr(product.form_data, name)
        print(f"   {name:22} {getattr(value, 'value', value)}")
    show_error(workflow)

    print("\n1. Edit field  2. Next  3. Back  4. Remove background  5. Delete product")
    choice = get_input("Select an option", "2")

    if choice == "1":
        name = get_input("Field")
        if name not in EDITABLE_FIELDS:
            print("❌ Unknown field")
            return
        value = get_input("Value")
        if name in ("shipping_available", "pickup_available"):
            value = value.lower() in ("y", "yes", "true", "1")
        workflow.update_field(name, value)
    elif choice == "2":
        workflow.next_product()
    elif choice == "3":
        workflow.previous_product()
    elif choice == "4":
        workflow.remove_background_current()
    elif choice == "5":
        workflow.delete_product(product.group_id)
        if not workflow.products:
            workflow.next_product()


def final_screen(workflow: BulkUploadWorkflow):
    summary = workflow.summary()
    print(f"📋 {summary['ready']} of {summary['total']} ready  |  Total ${summary['total_value']:,.0f}\n")
    for i, item in enumerate(summary["products"]):
        status = "✅" if item["ready"] else "⚠️ "
        print(f"{i}. {status} {item['title']} - {item['price']} - {item['photos']} photos - {item['delivery']}")
        for issue in item["issues"]:
            print(f"      • {issue}")
    show_error(workflow)

    print("\n1. Publish  2. Edit product  3. Back  0. Close")
    choice = get_input("Select an option", "1")

    if choice == "1":
        if not workflow.can_publish:
            print("❌ No products are ready to publish")
            return
        print("\n🚀 Publishing...")
        workflow.publish()
    elif choice == "2":
        workflow.edit_product(get_int("Product number"))
    elif choice == "3":
        workflow.back_to_reviewing()
    elif choice == "0":
        workflow.dismiss_error()
        workflow.close()


SCREENS = {
    Stage.PHOTOS: photos_screen,
    Stage.ASSIGNING: assigning_screen,
    Stage.ENHANCING: enhancing_screen,
    Stage.REVIEWING: reviewing_screen,
    Stage.FINAL: final_screen,
}


def main():
    """Main application loop"""
    logging.basicConfig(
        level=os.getenv("BULK_LISTER_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = PipelineConfig.from_env()
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    def on_complete(listing_ids):
        print(f"\n🎉 Created {len(listing_ids)} listing(s): {', '.join(listing_ids)}")

    with BulkUploadWorkflow.from_config(config, on_progress=show_progress) as workflow:
        workflow.open(on_complete=on_complete)

        while workflow.is_open:
            if workflow.stage == Stage.SUCCESS:
                workflow.close()
                break

            clear_screen()
            print_header()
            try:
                SCREENS[workflow.stage](workflow)
            except (WorkflowStateError, IndexError, KeyError, ValueError) as e:
                print(f"\n❌ {e}")
                input("\nPress Enter to continue...")

    print("\n👋 Thanks for using AI Bulk Lister!")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n👋 Interrupted by user. Goodbye!")
        sys.exit(0)
