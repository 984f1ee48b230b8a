'''
API endpoints for managing Classes.
'''
from typing import Annotated, Any
from uuid import UUID
from fastapi import APIRouter, Depends, status

from ..models import roster as roster_models
from ..services.roster_service import ClassService

class ClassesAPI:
    """
    A class to encapsulate endpoints for Classes.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/classes",
            tags=["Classes"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_classes,
                methods=["GET"],
                response_model=list[roster_models.ClassRead])
        self.router.add_api_route(
                "/{class_id}",
                self.get_class,
                methods=["GET"],
                response_model=roster_models.ClassRead)
        self.router.add_api_route(
                "/",
                self.create_class,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=roster_models.ClassRead)
        self.router.add_api_route(
                "/{class_id}",
                self.update_class,
                methods=["PATCH"],
                response_model=roster_models.ClassRead)
        self.router.add_api_route(
                "/{class_id}",
                self.delete_class,
                methods=["DELETE"])

    async def list_classes(
        self,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> list[Any]:
        return await class_service.get_all_classes_for_api()

    async def get_class(
        self,
        class_id: UUID,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> Any:
        return await class_service.get_class_by_id_for_api(class_id)

    async def create_class(
        self,
        class_data: roster_models.ClassCreate,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> Any:
        return await class_service.create_class(class_data.model_dump())

    async def update_class(
        self,
        class_id: UUID,
        update_data: roster_models.ClassUpdate,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ) -> Any:
        """
        Renames a class or changes its note. Only the fields sent are applied.
        """
        return await class_service.update_class(class_id, update_data.model_dump(exclude_unset=True))

    async def delete_class(
        self,
        class_id: UUID,
        class_service: Annotated[ClassService, Depends(ClassService)]
    ):
        """
        Deletes a class. Its students are kept without a class.
        """
        await class_service.delete_class(class_id)
        return {"message": "Class deleted successfully."}

# Instantiate the class and export its router
classes_api = ClassesAPI()
router = classes_api.router
