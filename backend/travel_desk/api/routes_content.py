from typing import List

from fastapi import APIRouter, Depends, HTTPException

from travel_desk.api import get_store, require_admin
from travel_desk.models.schemas import (
    BlogCreate,
    BlogPostSchema,
    BlogUpdate,
    TestimonialCreate,
    TestimonialSchema,
    TestimonialUpdate,
)
from travel_desk.services.content import prepare_blog_payload
from travel_desk.storage.repository import DataStore

blogs_router = APIRouter()
testimonials_router = APIRouter()


@blogs_router.get("/", response_model=List[BlogPostSchema])
def list_published_blogs(store: DataStore = Depends(get_store)) -> List[BlogPostSchema]:
    return [BlogPostSchema.from_domain(b) for b in store.get_blogs() if b.published]


@blogs_router.get("/all", response_model=List[BlogPostSchema], dependencies=[Depends(require_admin)])
def list_all_blogs(store: DataStore = Depends(get_store)) -> List[BlogPostSchema]:
    return [BlogPostSchema.from_domain(b) for b in store.get_blogs()]


@blogs_router.get("/{slug}", response_model=BlogPostSchema)
def get_blog(slug: str, store: DataStore = Depends(get_store)) -> BlogPostSchema:
    blog = store.get_blog_by_slug(slug)
    if not blog or not blog.published:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return BlogPostSchema.from_domain(blog)


@blogs_router.post("/", response_model=BlogPostSchema, status_code=201, dependencies=[Depends(require_admin)])
def create_blog(payload: BlogCreate, store: DataStore = Depends(get_store)) -> BlogPostSchema:
    data = prepare_blog_payload(payload.model_dump(exclude_none=True))
    return BlogPostSchema.from_domain(store.add_blog(data))


@blogs_router.put("/{blog_id}", response_model=BlogPostSchema, dependencies=[Depends(require_admin)])
def update_blog(
    blog_id: str, payload: BlogUpdate, store: DataStore = Depends(get_store)
) -> BlogPostSchema:
    blog = store.update_blog(blog_id, payload.model_dump(exclude_unset=True))
    if not blog:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return BlogPostSchema.from_domain(blog)


@blogs_router.delete("/{blog_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_blog(blog_id: str, store: DataStore = Depends(get_store)) -> None:
    if not store.delete_blog(blog_id):
        raise HTTPException(status_code=404, detail="Blog post not found")


@testimonials_router.get("/", response_model=List[TestimonialSchema])
def list_testimonials(
    featured: bool = False, store: DataStore = Depends(get_store)
) -> List[TestimonialSchema]:
    testimonials = store.get_testimonials()
    if featured:
        testimonials = [t for t in testimonials if t.featured]
    return [TestimonialSchema.from_domain(t) for t in testimonials]


@testimonials_router.post(
    "/", response_model=TestimonialSchema, status_code=201, dependencies=[Depends(require_admin)]
)
def create_testimonial(
    payload: TestimonialCreate, store: DataStore = Depends(get_store)
) -> TestimonialSchema:
    return TestimonialSchema.from_domain(store.add_testimonial(payload.model_dump()))


@testimonials_router.put(
    "/{testimonial_id}", response_model=TestimonialSchema, dependencies=[Depends(require_admin)]
)
def update_testimonial(
    testimonial_id: str, payload: TestimonialUpdate, store: DataStore = Depends(get_store)
) -> TestimonialSchema:
    testimonial = store.update_testimonial(testimonial_id, payload.model_dump(exclude_unset=True))
    if not testimonial:
        raise HTTPException(status_code=404, detail="Testimonial not found")
    return TestimonialSchema.from_domain(testimonial)


@testimonials_router.delete("/{testimonial_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_testimonial(testimonial_id: str, store: DataStore = Depends(get_store)) -> None:
    if not store.delete_testimonial(testimonial_id):
        raise HTTPException(status_code=404, detail="Testimonial not found")
